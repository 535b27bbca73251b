from typing import Any, Dict, List, Sequence

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, MetaData, String, Table, Uuid, func, text

from ...schemas.auth import AuthConfig
from ...schemas.project import Endpoint, FileType, GeneratedFile, GenerationOptions
from .base import Emitter
from .schema import SchemaEmitter

AUTH_TABLE = "auth_users"

BUNDLE = (
    ("app/auth/models.py", "auth/models.py.j2"),
    ("app/auth/service.py", "auth/service.py.j2"),
    ("app/auth/controller.py", "auth/controller.py.j2"),
    ("app/auth/middleware.py", "auth/middleware.py.j2"),
    ("app/auth/authorize.py", "auth/authorize.py.j2"),
    ("app/auth/routes.py", "auth/routes.py.j2"),
    ("app/auth/repository.py", "auth/repository.py.j2"),
    ("app/auth/validation.py", "auth/validation.py.j2"),
)


def default_role(roles: Sequence[str]) -> str:
    """Role given to self-registered users"""
    if "user" in roles or not roles:
        return "user"
    return roles[-1]


class AuthEmitter(Emitter):
    """Authentication bundle, parameterized only by the role list and auth type"""

    def __init__(self, env=None, schema_emitter: SchemaEmitter = None):
        super().__init__(env)
        self.schema_emitter = schema_emitter or SchemaEmitter(self.env)

    def emit_bundle(self, auth_config: AuthConfig, endpoints: Sequence[Endpoint], options: GenerationOptions,
                    context: Dict[str, Any]) -> List[GeneratedFile]:
        roles = list(auth_config.role_names) or ["user"]
        ctx = {
            **context,
            "auth_config": auth_config,
            "roles": roles,
            "default_role": default_role(roles),
            "endpoints": list(endpoints),
        }
        files = [self.emit(path, template, **ctx) for path, template in BUNDLE]
        files.append(
            GeneratedFile(
                path=f"schema/{AUTH_TABLE}.sql",
                content=self.user_schema_sql(roles, self._dialect(options)),
                type=FileType.CONFIG,
                language="sql",
            )
        )
        return files

    def user_schema_sql(self, roles: Sequence[str], dialect: str = "postgresql") -> str:
        metadata = MetaData()
        role_list = ", ".join(f"'{role}'" for role in roles)
        id_kwargs = {"server_default": text("gen_random_uuid()")} if dialect == "postgresql" else {}
        table = Table(
            AUTH_TABLE,
            metadata,
            Column("id", Uuid(), primary_key=True, **id_kwargs),
            Column("email", String(255), nullable=False, unique=True),
            Column("password_hash", String(255), nullable=False),
            Column("first_name", String(100)),
            Column("last_name", String(100)),
            Column("role", String(50), nullable=False, server_default=default_role(roles)),
            Column("is_active", Boolean(), nullable=False, server_default=text("true")),
            Column("last_login", DateTime(timezone=True)),
            Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
            Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
            CheckConstraint(f"role IN ({role_list})", name=f"{AUTH_TABLE}_role_check"),
        )
        Index(f"idx_{AUTH_TABLE}_email", table.c.email)
        Index(f"idx_{AUTH_TABLE}_role", table.c.role)

        statements = [
            "-- Authentication users",
            self.schema_emitter.render_table(table, dialect),
            self.schema_emitter.trigger_sql(AUTH_TABLE, dialect),
        ]
        return "\n\n".join(statements) + "\n"

    def _dialect(self, options: GenerationOptions) -> str:
        return options.database.value if options.database.is_relational else "postgresql"
