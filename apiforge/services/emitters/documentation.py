"""OpenAPI document and the renderings derived from it.

The document is built once from models, endpoints and the auth config.
The Swagger page, the Markdown reference and the Postman collection are
produced from that document alone.
"""
from typing import Any, Dict, List, Optional, Sequence
import json
import re

import yaml

from ...exceptions import GenerationError
from ...schemas.auth import AuthConfig, AuthType
from ...schemas.model import Field, Model, ValidationRuleType
from ...schemas.project import Endpoint, FileType, GeneratedFile, HttpMethod, Operation
from ...utils.naming import human_plural
from .. import type_mapper
from ..endpoint_service import AUTH_MODEL_NAME
from .base import Emitter, payload_fields, route_path

OPENAPI_VERSION = "3.0.0"
POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
SWAGGER_UI_VERSION = "5.9.0"

RULE_KEYWORDS = {
    ValidationRuleType.MIN_LENGTH: "minLength",
    ValidationRuleType.MAX_LENGTH: "maxLength",
    ValidationRuleType.MIN: "minimum",
    ValidationRuleType.MAX: "maximum",
    ValidationRuleType.PATTERN: "pattern",
}

# request schema, response schema, success status for each auth action
AUTH_ACTIONS = {
    "register": ("RegisterRequest", "LoginResponse", "201", "User registered"),
    "login": ("LoginRequest", "LoginResponse", "200", "Login successful"),
    "refresh": ("RefreshTokenRequest", "TokenResponse", "200", "Token refreshed"),
    "logout": (None, "MessageResponse", "200", "Logout successful"),
    "profile": (None, "ProfileResponse", "200", "User profile"),
}


def ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": schema}}


def merge_schemas(schemas: Dict[str, Any], owners: Dict[str, str], new: Dict[str, Any], owner: str):
    """Add component schemas; a name already taken by another owner is an error"""
    for name, schema in new.items():
        if name in schemas:
            raise GenerationError(f'Schema name "{name}" from {owner} clashes with {owners[name]}')
        schemas[name] = schema
        owners[name] = owner


def field_property(field: Field) -> Dict[str, Any]:
    prop: Dict[str, Any] = type_mapper.openapi_schema(field.type)
    if field.description:
        prop["description"] = field.description
    if field.default_value is not None:
        prop["default"] = field.default_value
    for rule in field.validation:
        keyword = RULE_KEYWORDS.get(rule.type)
        if keyword:
            prop[keyword] = rule.value
    prop["example"] = type_mapper.sample_value(field.type)
    return prop


class DocumentationEmitter(Emitter):
    def build_openapi_document(self, models: Sequence[Model], endpoints: Sequence[Endpoint],
                               auth_config: AuthConfig, title: str = "Generated API") -> Dict[str, Any]:
        models_by_name = {m.name: m for m in models}
        has_auth_endpoints = any(e.auth_action for e in endpoints)

        schemas: Dict[str, Any] = {}
        owners: Dict[str, str] = {}
        for model in models:
            merge_schemas(schemas, owners, self._model_schemas(model), f'model "{model.name}"')
        merge_schemas(schemas, owners, self._shared_schemas(), "the shared components")
        if has_auth_endpoints:
            merge_schemas(schemas, owners, self._auth_schemas(auth_config), "the auth bundle")

        tags = [
            {"name": m.name, "description": m.metadata.description or f"{m.name} management"}
            for m in models
        ]
        if has_auth_endpoints and AUTH_MODEL_NAME not in models_by_name:
            tags.insert(0, {"name": AUTH_MODEL_NAME, "description": "Authentication and user profile"})

        paths: Dict[str, Dict[str, Any]] = {}
        for endpoint in endpoints:
            path = route_path(endpoint.path)
            if endpoint.auth_action:
                operation = self._auth_operation(endpoint, auth_config)
            else:
                operation = self._crud_operation(endpoint, models_by_name.get(endpoint.model_name), auth_config)
            paths.setdefault(path, {})[endpoint.method.value.lower()] = operation

        return {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": title,
                "version": "1.0.0",
                "description": "API generated from the model definitions",
            },
            "servers": [
                {"url": "http://localhost:8000", "description": "Development server"},
                {"url": "https://api.example.com", "description": "Production server"},
            ],
            "tags": tags,
            "paths": paths,
            "components": {
                "schemas": schemas,
                "securitySchemes": self._security_schemes(auth_config),
            },
        }

    def minimal_document(self, title: str = "Generated API") -> Dict[str, Any]:
        return {
            "openapi": OPENAPI_VERSION,
            "info": {"title": title, "version": "1.0.0"},
            "paths": {},
        }

    def emit_documentation(self, document: Dict[str, Any]) -> List[GeneratedFile]:
        return [
            GeneratedFile(path="docs/openapi.json", content=self.render_json(document),
                          type=FileType.DOCUMENTATION, language="json"),
            GeneratedFile(path="docs/openapi.yaml", content=self.render_yaml(document),
                          type=FileType.DOCUMENTATION, language="yaml"),
            GeneratedFile(path="docs/index.html", content=self.render_swagger_html(document),
                          type=FileType.DOCUMENTATION, language="html"),
            GeneratedFile(path="docs/API.md", content=self.render_markdown(document),
                          type=FileType.DOCUMENTATION, language="markdown"),
            GeneratedFile(path="docs/postman-collection.json",
                          content=self.render_json(self.build_postman_collection(document)),
                          type=FileType.DOCUMENTATION, language="json"),
        ]

    def render_json(self, document: Dict[str, Any]) -> str:
        return json.dumps(document, indent=2) + "\n"

    def render_yaml(self, document: Dict[str, Any]) -> str:
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)

    def render_swagger_html(self, document: Dict[str, Any]) -> str:
        spec = json.dumps(document, indent=2).replace("</", "<\\/")
        return self.render(
            "docs/swagger.html.j2",
            title=document["info"]["title"],
            spec=spec,
            swagger_version=SWAGGER_UI_VERSION,
        )

    def render_markdown(self, document: Dict[str, Any]) -> str:
        groups: Dict[str, List[Dict[str, Any]]] = {tag["name"]: [] for tag in document.get("tags", [])}
        for path, methods in document["paths"].items():
            for method, operation in methods.items():
                for tag in operation.get("tags", ["default"]):
                    groups.setdefault(tag, []).append({"path": path, "method": method.upper(), "op": operation})

        models = {
            name: schema for name, schema in document.get("components", {}).get("schemas", {}).items()
            if "properties" in schema
        }
        return self.render(
            "docs/API.md.j2",
            doc=document,
            groups=groups,
            models=models,
            describe_type=describe_type,
            ref_name=ref_name,
        )

    def build_postman_collection(self, document: Dict[str, Any]) -> Dict[str, Any]:
        base_url = document.get("servers", [{"url": "http://localhost:8000"}])[0]["url"]
        schemas = document.get("components", {}).get("schemas", {})
        folders: Dict[str, List[Dict[str, Any]]] = {tag["name"]: [] for tag in document.get("tags", [])}

        for path, methods in document["paths"].items():
            for method, operation in methods.items():
                item = self._postman_request(path, method, operation, schemas)
                for tag in operation.get("tags", ["default"]):
                    folders.setdefault(tag, []).append(item)

        return {
            "info": {
                "name": document["info"]["title"],
                "description": document["info"].get("description", ""),
                "schema": POSTMAN_SCHEMA,
            },
            "auth": {
                "type": "bearer",
                "bearer": [{"key": "token", "value": "{{authToken}}", "type": "string"}],
            },
            "variable": [
                {"key": "baseUrl", "value": base_url, "type": "string"},
                {"key": "authToken", "value": "", "type": "string"},
            ],
            "item": [{"name": name, "item": items} for name, items in folders.items() if items],
        }

    def _postman_request(self, path: str, method: str, operation: Dict[str, Any],
                         schemas: Dict[str, Any]) -> Dict[str, Any]:
        postman_path = re.sub(r"\{(\w+)\}", r":\1", path)
        segments = [s for s in postman_path.split("/") if s]
        url: Dict[str, Any] = {
            "raw": "{{baseUrl}}" + postman_path,
            "host": ["{{baseUrl}}"],
            "path": segments,
        }

        params = operation.get("parameters", [])
        path_vars = [
            {"key": p["name"], "value": "", "description": p.get("description", "")}
            for p in params if p["in"] == "path"
        ]
        query = [
            {"key": p["name"], "value": str(p.get("schema", {}).get("default", "")),
             "description": p.get("description", "")}
            for p in params if p["in"] == "query"
        ]
        if path_vars:
            url["variable"] = path_vars
        if query:
            url["query"] = query
            url["raw"] += "?" + "&".join(f"{q['key']}={q['value']}" for q in query)

        request: Dict[str, Any] = {
            "method": method.upper(),
            "header": [{"key": "Content-Type", "value": "application/json"}],
            "url": url,
            "description": operation.get("description", ""),
        }
        if not operation.get("security"):
            request["auth"] = {"type": "noauth"}

        body_schema = (
            operation.get("requestBody", {}).get("content", {}).get("application/json", {}).get("schema")
        )
        if body_schema:
            request["body"] = {
                "mode": "raw",
                "raw": json.dumps(example_for(body_schema, schemas), indent=2),
                "options": {"raw": {"language": "json"}},
            }

        return {"name": operation.get("summary", f"{method.upper()} {path}"), "request": request}

    def _model_schemas(self, model: Model) -> Dict[str, Any]:
        fields = payload_fields(model)
        properties = {f.name: field_property(f) for f in fields}
        required = [f.name for f in fields if f.required]

        base_properties: Dict[str, Any] = {"id": {"type": "string", "format": "uuid", "description": "Unique identifier"}}
        base_properties.update(properties)
        base_required = ["id"] + required
        if model.metadata.timestamps:
            base_properties["created_at"] = {"type": "string", "format": "date-time", "description": "Creation timestamp"}
            base_properties["updated_at"] = {"type": "string", "format": "date-time", "description": "Last update timestamp"}
            base_required += ["created_at", "updated_at"]

        base = {"type": "object", "properties": base_properties, "required": base_required}
        if model.metadata.description:
            base["description"] = model.metadata.description

        create = {"type": "object", "properties": properties}
        if required:
            create["required"] = required

        return {
            model.name: base,
            f"Create{model.name}Request": create,
            f"Update{model.name}Request": {"type": "object", "properties": {n: dict(p) for n, p in properties.items()}},
            f"{model.name}ListResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": True},
                    "data": {"type": "array", "items": ref(model.name)},
                    "pagination": ref("PaginationInfo"),
                },
            },
            f"{model.name}Response": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": True},
                    "data": ref(model.name),
                },
            },
        }

    def _shared_schemas(self) -> Dict[str, Any]:
        return {
            "PaginationInfo": {
                "type": "object",
                "properties": {
                    "page": {"type": "integer", "example": 1},
                    "limit": {"type": "integer", "example": 10},
                    "total": {"type": "integer", "example": 100},
                    "total_pages": {"type": "integer", "example": 10},
                },
                "required": ["page", "limit", "total", "total_pages"],
            },
            "ErrorResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": False},
                    "error": {"type": "string", "example": "Error message"},
                    "details": {"type": "object"},
                },
                "required": ["success", "error"],
            },
        }

    def _auth_schemas(self, auth_config: AuthConfig) -> Dict[str, Any]:
        roles = list(auth_config.role_names) or ["user"]
        email = {"type": "string", "format": "email", "example": "user@example.com"}
        profile = {
            "type": "object",
            "properties": {
                "id": {"type": "string", "format": "uuid"},
                "email": email,
                "first_name": {"type": "string", "example": "Ada"},
                "last_name": {"type": "string", "example": "Lovelace"},
                "role": {"type": "string", "enum": roles},
                "is_active": {"type": "boolean"},
                "last_login": {"type": "string", "format": "date-time"},
            },
            "required": ["id", "email", "role"],
        }
        tokens = {
            "type": "object",
            "properties": {
                "access_token": {"type": "string"},
                "refresh_token": {"type": "string"},
                "token_type": {"type": "string", "example": "bearer"},
                "expires_in": {"type": "integer", "example": 900},
            },
            "required": ["access_token", "refresh_token", "token_type", "expires_in"],
        }
        return {
            "RegisterRequest": {
                "type": "object",
                "properties": {
                    "email": email,
                    "password": {"type": "string", "format": "password", "minLength": 8, "example": "Secret123"},
                    "first_name": {"type": "string", "maxLength": 100, "example": "Ada"},
                    "last_name": {"type": "string", "maxLength": 100, "example": "Lovelace"},
                    "role": {"type": "string", "enum": roles},
                },
                "required": ["email", "password"],
            },
            "LoginRequest": {
                "type": "object",
                "properties": {
                    "email": email,
                    "password": {"type": "string", "format": "password", "example": "Secret123"},
                },
                "required": ["email", "password"],
            },
            "RefreshTokenRequest": {
                "type": "object",
                "properties": {"refresh_token": {"type": "string"}},
                "required": ["refresh_token"],
            },
            "UserProfile": profile,
            "TokenResponse": tokens,
            "LoginResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": True},
                    "user": ref("UserProfile"),
                    "tokens": ref("TokenResponse"),
                },
            },
            "ProfileResponse": {
                "type": "object",
                "properties": {"success": {"type": "boolean", "example": True}, "data": ref("UserProfile")},
            },
            "MessageResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": True},
                    "message": {"type": "string"},
                },
            },
        }

    def _security_schemes(self, auth_config: AuthConfig) -> Dict[str, Any]:
        if auth_config.type == AuthType.JWT:
            return {"bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}}
        if auth_config.type == AuthType.SESSION:
            return {"sessionAuth": {"type": "apiKey", "in": "cookie", "name": "sessionId"}}

        schemes = {}
        for provider in auth_config.providers:
            name = provider.name.value
            schemes[f"oauth_{name}"] = {
                "type": "oauth2",
                "flows": {
                    "authorizationCode": {
                        "authorizationUrl": f"https://{name}.com/oauth/authorize",
                        "tokenUrl": f"https://{name}.com/oauth/token",
                        "scopes": {scope: f"{scope} access" for scope in provider.scopes},
                    }
                },
            }
        return schemes

    def _security_requirement(self, auth_config: AuthConfig) -> List[Dict[str, List[str]]]:
        return [{name: []} for name in self._security_schemes(auth_config)]

    def _crud_operation(self, endpoint: Endpoint, model: Optional[Model], auth_config: AuthConfig) -> Dict[str, Any]:
        name = endpoint.model_name
        operation: Dict[str, Any] = {
            "summary": endpoint.description,
            "description": endpoint.description,
            "operationId": f"{endpoint.operation.value}{name}",
            "tags": [name],
        }

        parameters = []
        if ":id" in endpoint.path:
            parameters.append({
                "name": "id",
                "in": "path",
                "required": True,
                "schema": {"type": "string", "format": "uuid"},
                "description": f"{name} ID",
            })
        if endpoint.operation == Operation.LIST:
            parameters.append({
                "name": "page", "in": "query", "required": False,
                "schema": {"type": "integer", "minimum": 1, "default": 1}, "description": "Page number",
            })
            parameters.append({
                "name": "limit", "in": "query", "required": False,
                "schema": {"type": "integer", "minimum": 1, "maximum": 100, "default": 10},
                "description": "Number of items per page",
            })
        if parameters:
            operation["parameters"] = parameters

        if endpoint.method in (HttpMethod.POST, HttpMethod.PUT) and model is not None:
            schema_name = f"Create{name}Request" if endpoint.method == HttpMethod.POST else f"Update{name}Request"
            operation["requestBody"] = {"required": True, "content": json_content(ref(schema_name))}

        responses: Dict[str, Any] = {}
        if endpoint.operation == Operation.CREATE:
            responses["201"] = {"description": f"{name} created successfully", "content": json_content(ref(f"{name}Response"))}
        elif endpoint.operation in (Operation.READ, Operation.UPDATE):
            verb = "retrieved" if endpoint.operation == Operation.READ else "updated"
            responses["200"] = {"description": f"{name} {verb} successfully", "content": json_content(ref(f"{name}Response"))}
            responses["404"] = self._error(f"{name} not found")
        elif endpoint.operation == Operation.DELETE:
            responses["204"] = {"description": f"{name} deleted successfully"}
            responses["404"] = self._error(f"{name} not found")
        elif endpoint.operation == Operation.LIST:
            responses["200"] = {
                "description": f"{human_plural(name)} retrieved successfully",
                "content": json_content(ref(f"{name}ListResponse")),
            }

        operation["responses"] = self._common_responses(responses, endpoint)
        if endpoint.authenticated:
            operation["security"] = self._security_requirement(auth_config)
        return operation

    def _auth_operation(self, endpoint: Endpoint, auth_config: AuthConfig) -> Dict[str, Any]:
        action = endpoint.auth_action
        request_schema, response_schema, success, message = AUTH_ACTIONS[action]
        operation: Dict[str, Any] = {
            "summary": endpoint.description,
            "description": endpoint.description,
            "operationId": f"auth{action.capitalize()}",
            "tags": [AUTH_MODEL_NAME],
        }
        if request_schema:
            operation["requestBody"] = {"required": True, "content": json_content(ref(request_schema))}
        responses = {success: {"description": message, "content": json_content(ref(response_schema))}}
        if endpoint.operation == Operation.READ:
            responses["404"] = self._error("User not found")
        operation["responses"] = self._common_responses(responses, endpoint)
        if endpoint.authenticated:
            operation["security"] = self._security_requirement(auth_config)
        return operation

    def _common_responses(self, responses: Dict[str, Any], endpoint: Endpoint) -> Dict[str, Any]:
        responses["400"] = self._error("Bad request")
        if endpoint.authenticated:
            responses["401"] = self._error("Unauthorized")
        if endpoint.roles:
            responses["403"] = self._error("Forbidden")
        responses["500"] = self._error("Internal server error")
        return responses

    def _error(self, description: str) -> Dict[str, Any]:
        return {"description": description, "content": json_content(ref("ErrorResponse"))}


def ref_name(schema: Dict[str, Any]) -> Optional[str]:
    target = schema.get("$ref")
    return target.rsplit("/", 1)[-1] if target else None


def describe_type(schema: Dict[str, Any]) -> str:
    """Short type label for Markdown tables"""
    name = ref_name(schema)
    if name:
        return name
    if schema.get("type") == "array":
        return f"array<{describe_type(schema.get('items', {}))}>"
    label = schema.get("type", "object")
    if schema.get("format"):
        label += f" ({schema['format']})"
    return label


def example_for(schema: Dict[str, Any], schemas: Dict[str, Any], depth: int = 0) -> Any:
    """Sample value for a schema, preferring the examples carried in the document"""
    name = ref_name(schema)
    if name:
        return example_for(schemas.get(name, {}), schemas, depth + 1) if depth < 5 else {}
    if "example" in schema:
        return schema["example"]
    if "default" in schema:
        return schema["default"]
    if "enum" in schema:
        return schema["enum"][0]
    kind = schema.get("type", "object")
    if kind == "object":
        return {key: example_for(prop, schemas, depth + 1) for key, prop in schema.get("properties", {}).items()}
    if kind == "array":
        return [example_for(schema.get("items", {}), schemas, depth + 1)]
    return {"integer": 0, "number": 0, "boolean": False}.get(kind, "string")
