from pydantic import Field
from typing import Optional, Tuple
import enum

from .base import FrozenCamelModel


class AuthType(str, enum.Enum):
    JWT = "jwt"
    OAUTH = "oauth"
    SESSION = "session"


class OAuthProviderName(str, enum.Enum):
    GOOGLE = "google"
    GITHUB = "github"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"


class OAuthProvider(FrozenCamelModel):
    name: OAuthProviderName
    client_id: str
    client_secret: str
    scopes: Tuple[str, ...] = ()


class SessionConfig(FrozenCamelModel):
    secret: str
    max_age: int = 86400
    secure: bool = False
    http_only: bool = True
    same_site: str = "lax"


class Role(FrozenCamelModel):
    name: str = Field(..., min_length=1)
    permissions: Tuple[str, ...] = ()
    description: Optional[str] = None


class AuthConfig(FrozenCamelModel):
    type: AuthType = AuthType.JWT
    providers: Tuple[OAuthProvider, ...] = ()
    jwt_secret: Optional[str] = None
    session_config: Optional[SessionConfig] = None
    roles: Tuple[Role, ...] = ()
    protected_routes: Tuple[str, ...] = ()

    @property
    def role_names(self) -> Tuple[str, ...]:
        return tuple(role.name for role in self.roles)


def default_auth_config(auth_type: AuthType = AuthType.JWT) -> AuthConfig:
    """Admin with full CRUD permissions and a read-only user"""
    return AuthConfig(
        type=auth_type,
        roles=(
            Role(name="admin", permissions=("create", "read", "update", "delete")),
            Role(name="user", permissions=("read",)),
        ),
    )
