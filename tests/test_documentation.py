import json

import pytest
import yaml

from apiforge.exceptions import GenerationError
from apiforge.schemas import AuthConfig, AuthType, OAuthProvider, default_auth_config
from apiforge.services import EndpointService
from apiforge.services.emitters import DocumentationEmitter
from apiforge.services.emitters.documentation import describe_type, example_for


def build_document(models, auth_config=None, with_auth_endpoints=True):
    auth_config = auth_config or default_auth_config()
    service = EndpointService()
    endpoints = service.synthesize_all(models, auth_config)
    if with_auth_endpoints:
        endpoints.extend(service.auth_endpoints())
    return DocumentationEmitter().build_openapi_document(models, endpoints, auth_config)


class TestOpenAPIDocument:
    def test_paths_use_braces(self, blog_models):
        document = build_document(blog_models)

        assert document["openapi"] == "3.0.0"
        assert set(document["paths"]) >= {"/user", "/user/{id}", "/post", "/post/{id}", "/auth/login"}
        assert set(document["paths"]["/user/{id}"]) == {"get", "put", "delete"}

    def test_crud_responses(self, blog_models):
        paths = build_document(blog_models)["paths"]

        create = paths["/user"]["post"]
        assert create["operationId"] == "createUser"
        assert set(create["responses"]) == {"201", "400", "401", "403", "500"}
        assert create["requestBody"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/CreateUserRequest"
        }
        assert create["security"] == [{"bearerAuth": []}]

        read = paths["/user/{id}"]["get"]
        assert set(read["responses"]) == {"200", "400", "404", "500"}
        assert "security" not in read
        assert read["parameters"][0]["name"] == "id"

        delete = paths["/user/{id}"]["delete"]
        assert "204" in delete["responses"]

        listing = paths["/user"]["get"]
        assert [p["name"] for p in listing["parameters"]] == ["page", "limit"]
        assert listing["responses"]["200"]["description"] == "Users retrieved successfully"

    def test_model_schemas(self, blog_models):
        schemas = build_document(blog_models)["components"]["schemas"]

        user = schemas["User"]
        assert user["required"] == ["id", "email", "name", "created_at", "updated_at"]
        assert user["properties"]["email"]["format"] == "email"
        assert user["properties"]["email"]["pattern"] == r"^[^@]+@[^@]+$"
        assert user["properties"]["name"]["maxLength"] == 100
        assert schemas["CreateUserRequest"]["required"] == ["email", "name"]
        assert "required" not in schemas["UpdateUserRequest"]
        assert schemas["Post"]["properties"]["published"]["default"] is False
        assert {"PaginationInfo", "ErrorResponse", "LoginRequest", "UserListResponse"} <= set(schemas)

    def test_tags(self, blog_models):
        document = build_document(blog_models)
        assert [t["name"] for t in document["tags"]] == ["Auth", "User", "Post"]

        without_auth = build_document(blog_models, with_auth_endpoints=False)
        assert [t["name"] for t in without_auth["tags"]] == ["User", "Post"]
        assert "LoginRequest" not in without_auth["components"]["schemas"]

    def test_auth_operations(self, blog_models):
        paths = build_document(blog_models)["paths"]

        assert paths["/auth/register"]["post"]["operationId"] == "authRegister"
        assert "201" in paths["/auth/register"]["post"]["responses"]
        assert "security" not in paths["/auth/login"]["post"]
        assert "404" in paths["/auth/profile"]["get"]["responses"]
        assert paths["/auth/profile"]["get"]["security"] == [{"bearerAuth": []}]

    def test_model_named_auth_without_auth_bundle(self, user_model):
        auth = user_model.model_copy(update={"name": "Auth"})
        document = build_document([auth], AuthConfig(type=AuthType.SESSION), with_auth_endpoints=False)

        assert document["paths"]["/auth"]["post"]["operationId"] == "createAuth"
        assert "/auth/login" not in document["paths"]
        assert [t["name"] for t in document["tags"]] == ["Auth"]

    def test_model_named_auth_next_to_auth_bundle(self, user_model):
        auth = user_model.model_copy(update={"name": "Auth"})
        document = build_document([auth])

        assert document["paths"]["/auth"]["post"]["operationId"] == "createAuth"
        assert document["paths"]["/auth/login"]["post"]["operationId"] == "authLogin"
        assert [t["name"] for t in document["tags"]] == ["Auth"]

    def test_model_schema_clashing_with_shared_components(self, user_model):
        clash = user_model.model_copy(update={"name": "ErrorResponse"})
        with pytest.raises(GenerationError, match="ErrorResponse"):
            build_document([clash], with_auth_endpoints=False)

    def test_model_schema_clashing_with_auth_bundle(self, user_model):
        login = user_model.model_copy(update={"name": "Login"})
        with pytest.raises(GenerationError, match="LoginResponse"):
            build_document([login])

        assert "LoginResponse" in build_document([login], with_auth_endpoints=False)["components"]["schemas"]

    def test_session_scheme(self, user_model):
        document = build_document([user_model], AuthConfig(type=AuthType.SESSION), with_auth_endpoints=False)
        assert document["components"]["securitySchemes"] == {
            "sessionAuth": {"type": "apiKey", "in": "cookie", "name": "sessionId"}
        }

    def test_oauth_schemes(self, user_model):
        auth_config = AuthConfig(
            type=AuthType.OAUTH,
            providers=(OAuthProvider(name="github", client_id="id", client_secret="secret", scopes=("user",)),),
        )
        document = build_document([user_model], auth_config, with_auth_endpoints=False)

        scheme = document["components"]["securitySchemes"]["oauth_github"]
        assert scheme["type"] == "oauth2"
        assert scheme["flows"]["authorizationCode"]["scopes"] == {"user": "user access"}
        assert document["paths"]["/user"]["post"]["security"] == [{"oauth_github": []}]

    def test_minimal_document(self):
        document = DocumentationEmitter().minimal_document()
        assert document == {"openapi": "3.0.0", "info": {"title": "Generated API", "version": "1.0.0"}, "paths": {}}


class TestRenderings:
    def test_emitted_files(self, blog_models):
        files = {f.path: f for f in DocumentationEmitter().emit_documentation(build_document(blog_models))}

        assert sorted(files) == [
            "docs/API.md",
            "docs/index.html",
            "docs/openapi.json",
            "docs/openapi.yaml",
            "docs/postman-collection.json",
        ]
        assert json.loads(files["docs/openapi.json"].content) == yaml.safe_load(files["docs/openapi.yaml"].content)

    def test_swagger_page(self, blog_models):
        html = DocumentationEmitter().render_swagger_html(build_document(blog_models))
        assert "swagger-ui-dist@5.9.0" in html
        assert "SwaggerUIBundle" in html
        assert '"openapi": "3.0.0"' in html

    def test_markdown(self, blog_models):
        markdown = DocumentationEmitter().render_markdown(build_document(blog_models))

        assert markdown.startswith("# Generated API")
        assert "## Authentication" in markdown
        assert "### bearerAuth" in markdown
        assert "| `email` | string (email) | Yes |" in markdown
        assert "#### POST /user" in markdown
        assert "**Request Body:** `CreateUserRequest`" in markdown
        assert "- `404`: User not found" in markdown

    def test_postman_collection(self, blog_models):
        collection = DocumentationEmitter().build_postman_collection(build_document(blog_models))

        assert [folder["name"] for folder in collection["item"]] == ["Auth", "User", "Post"]
        assert collection["variable"][0] == {"key": "baseUrl", "value": "http://localhost:8000", "type": "string"}

        user_items = {item["name"]: item["request"] for item in collection["item"][1]["item"]}
        read = user_items["Get a User by ID"]
        assert read["url"]["raw"] == "{{baseUrl}}/user/:id"
        assert read["url"]["variable"][0]["key"] == "id"
        assert read["auth"] == {"type": "noauth"}

        listing = user_items["List all Users"]
        assert listing["url"]["raw"] == "{{baseUrl}}/user?page=1&limit=10"

        create = user_items["Create a new User"]
        assert "auth" not in create
        assert json.loads(create["body"]["raw"]) == {
            "email": "test@example.com",
            "name": "test string",
            "age": 42,
        }


class TestHelpers:
    def test_describe_type(self):
        assert describe_type({"$ref": "#/components/schemas/User"}) == "User"
        assert describe_type({"type": "array", "items": {"type": "string"}}) == "array<string>"
        assert describe_type({"type": "string", "format": "uuid"}) == "string (uuid)"

    def test_example_for_follows_refs(self):
        schemas = {"Thing": {"type": "object", "properties": {"n": {"type": "integer"}, "ok": {"type": "boolean"}}}}
        assert example_for({"$ref": "#/components/schemas/Thing"}, schemas) == {"n": 0, "ok": False}
