from functools import lru_cache
from typing import Any, Dict, Iterable, List, Sequence
import re

from jinja2 import Environment, PackageLoader, StrictUndefined

from ...schemas.auth import AuthConfig
from ...schemas.model import Field, Model
from ...schemas.project import FileType, GeneratedFile, GenerationOptions
from ...utils.naming import pluralize, route_segment, snake_case, table_name
from .. import type_mapper

IMPLICIT_COLUMNS = ("id",)


def payload_fields(model: Model) -> List[Field]:
    """Fields the client supplies; the primary key is always generated"""
    return [f for f in model.fields if f.name not in IMPLICIT_COLUMNS]


def python_imports(fields: Iterable[Field]) -> List[str]:
    imports = set()
    for field in fields:
        imports.update(type_mapper.get_type_mapping(field.type).python_imports)
    return sorted(imports)


def sa_imports(fields: Iterable[Field], extra: Sequence[str] = ()) -> List[str]:
    names = set(extra)
    for field in fields:
        names.update(type_mapper.get_type_mapping(field.type).sa_imports)
    return sorted(names)


def field_type(field: Field) -> str:
    return type_mapper.python_type(field.type)


def sa_column(field: Field) -> str:
    return type_mapper.get_type_mapping(field.type).sa_column


def sample(field: Field) -> Any:
    return type_mapper.sample_value(field.type)


def route_path(path: str) -> str:
    """/user/:id -> /user/{id}"""
    return re.sub(r":(\w+)", r"{\1}", path)


def const_name(value: str) -> str:
    return re.sub(r"\W", "_", value).upper()


@lru_cache(maxsize=None)
def get_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("apiforge", "templates"),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters.update(
        py_type=field_type,
        sa_column=sa_column,
        sample=sample,
        pyrepr=repr,
        snake=snake_case,
        plural=pluralize,
        route_path=route_path,
        const_name=const_name,
    )
    env.globals.update(
        payload_fields=payload_fields,
        python_imports=python_imports,
        sa_imports=sa_imports,
        table_name=table_name,
        route_segment=route_segment,
    )
    return env


class Emitter:
    """Base for emitters: renders package templates into GeneratedFile objects"""

    def __init__(self, env: Environment = None):
        self.env = env or get_environment()

    def render(self, template: str, **context) -> str:
        return self.env.get_template(template).render(**context)

    def emit(self, path: str, template: str, file_type: FileType = FileType.SOURCE,
             language: str = "python", **context) -> GeneratedFile:
        return GeneratedFile(
            path=path,
            content=self.render(template, **context),
            type=file_type,
            language=language,
        )


def project_context(options: GenerationOptions, auth_config: AuthConfig, models: Sequence[Model]) -> Dict[str, Any]:
    """Template variables shared by every emitter"""
    return {
        "options": options,
        "project_name": options.project_name,
        "database": options.database.value,
        "relational": options.database.is_relational,
        "auth_enabled": options.authentication.value == "jwt",
        "auth_config": auth_config,
        "roles": list(auth_config.role_names),
        "models": list(models),
        "include_tests": options.include_tests,
        "include_documentation": options.include_documentation,
    }


def model_context(model: Model) -> Dict[str, Any]:
    name = snake_case(model.name)
    return {
        "model": model,
        "name": model.name,
        "module": name,
        "table": table_name(model),
        "fields": payload_fields(model),
        "timestamps": model.metadata.timestamps,
        "soft_delete": model.metadata.soft_delete,
    }
