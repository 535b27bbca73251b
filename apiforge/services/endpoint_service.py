from dataclasses import dataclass
from typing import Iterator, List, Sequence
import uuid

from ..schemas.auth import AuthConfig
from ..schemas.model import Model
from ..schemas.project import Endpoint, HttpMethod, Operation
from ..utils.naming import human_plural, route_segment

ENDPOINT_NAMESPACE = uuid.UUID("6f1c1e52-3b7d-5c59-9a43-2f4d1c7e8b10")

AUTH_MODEL_NAME = "Auth"
AUTH_ROUTE_SEGMENT = "auth"


def endpoint_id(model_name: str, operation: str) -> str:
    """Stable id for an endpoint, so regenerating a project yields the same ids"""
    return str(uuid.uuid5(ENDPOINT_NAMESPACE, f"{model_name}:{operation}"))


@dataclass(frozen=True)
class CRUDEndpoints:
    create: Endpoint
    read: Endpoint
    update: Endpoint
    delete: Endpoint
    list: Endpoint

    def __iter__(self) -> Iterator[Endpoint]:
        return iter((self.create, self.read, self.update, self.delete, self.list))


class EndpointService:
    def synthesize(self, model: Model, auth_config: AuthConfig) -> CRUDEndpoints:
        """Derive the five CRUD endpoints for a model"""
        base_path = f"/{route_segment(model.name)}"
        item_path = f"{base_path}/:id"
        should_protect = model.metadata.requires_auth is not False
        roles = auth_config.role_names if should_protect else ()

        def build(path, method, operation, authenticated, endpoint_roles, description):
            return Endpoint(
                id=endpoint_id(model.name, operation.value),
                path=path,
                method=method,
                model_name=model.name,
                operation=operation,
                authenticated=authenticated,
                roles=endpoint_roles,
                description=description,
            )

        return CRUDEndpoints(
            create=build(base_path, HttpMethod.POST, Operation.CREATE, should_protect, roles,
                         f"Create a new {model.name}"),
            read=build(item_path, HttpMethod.GET, Operation.READ, False, (),
                       f"Get a {model.name} by ID"),
            update=build(item_path, HttpMethod.PUT, Operation.UPDATE, should_protect, roles,
                         f"Update a {model.name} by ID"),
            delete=build(item_path, HttpMethod.DELETE, Operation.DELETE, should_protect,
                         ("admin",) if should_protect else (),
                         f"Delete a {model.name} by ID"),
            list=build(base_path, HttpMethod.GET, Operation.LIST, False, (),
                       f"List all {human_plural(model.name)}"),
        )

    def synthesize_all(self, models: Sequence[Model], auth_config: AuthConfig) -> List[Endpoint]:
        endpoints: List[Endpoint] = []
        for model in models:
            endpoints.extend(self.synthesize(model, auth_config))
        return endpoints

    def auth_endpoints(self) -> List[Endpoint]:
        """Fixed endpoints contributed by the auth bundle"""
        spec = [
            ("register", "/auth/register", HttpMethod.POST, Operation.CREATE, False, "Register a new user"),
            ("login", "/auth/login", HttpMethod.POST, Operation.CREATE, False, "Login user"),
            ("refresh", "/auth/refresh", HttpMethod.POST, Operation.CREATE, False, "Refresh access token"),
            ("logout", "/auth/logout", HttpMethod.POST, Operation.DELETE, True, "Logout user"),
            ("profile", "/auth/profile", HttpMethod.GET, Operation.READ, True, "Get user profile"),
        ]
        return [
            Endpoint(
                id=endpoint_id(AUTH_MODEL_NAME, action),
                path=path,
                method=method,
                model_name=AUTH_MODEL_NAME,
                operation=operation,
                authenticated=authenticated,
                roles=(),
                description=description,
                auth_action=action,
            )
            for action, path, method, operation, authenticated, description in spec
        ]
