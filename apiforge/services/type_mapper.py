"""Field type lookup table.

Every emitter that needs to know how an abstract field type looks in Python,
in SQL, in OpenAPI or as sample data goes through this module.
"""
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from sqlalchemy import DECIMAL, JSON, REAL, Boolean, DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeEngine

from ..exceptions import UnsupportedFieldTypeError
from ..schemas.model import FieldType


@dataclass(frozen=True)
class TypeMapping:
    python_type: str
    python_imports: Tuple[str, ...]
    sa_column: str  # SQLAlchemy type expression rendered into generated ORM models
    sa_imports: Tuple[str, ...]
    column: TypeEngine  # SQLAlchemy type compiled into DDL
    schema: Dict[str, str]
    sample: Any
    default: Any


TYPE_MAP: Dict[FieldType, TypeMapping] = {
    FieldType.STRING: TypeMapping(
        python_type="str",
        python_imports=(),
        sa_column="String(255)",
        sa_imports=("String",),
        column=String(255),
        schema={"type": "string"},
        sample="test string",
        default="",
    ),
    FieldType.NUMBER: TypeMapping(
        python_type="float",
        python_imports=(),
        sa_column="Numeric",
        sa_imports=("Numeric",),
        column=Numeric(),
        schema={"type": "number"},
        sample=42,
        default=0,
    ),
    FieldType.BOOLEAN: TypeMapping(
        python_type="bool",
        python_imports=(),
        sa_column="Boolean",
        sa_imports=("Boolean",),
        column=Boolean(),
        schema={"type": "boolean"},
        sample=True,
        default=False,
    ),
    FieldType.DATE: TypeMapping(
        python_type="datetime",
        python_imports=("from datetime import datetime",),
        sa_column="DateTime(timezone=True)",
        sa_imports=("DateTime",),
        column=DateTime(timezone=True),
        schema={"type": "string", "format": "date-time"},
        sample="2024-01-01T00:00:00Z",
        default=None,
    ),
    FieldType.EMAIL: TypeMapping(
        python_type="EmailStr",
        python_imports=("from pydantic import EmailStr",),
        sa_column="String(255)",
        sa_imports=("String",),
        column=String(255),
        schema={"type": "string", "format": "email"},
        sample="test@example.com",
        default="",
    ),
    FieldType.URL: TypeMapping(
        python_type="str",
        python_imports=(),
        sa_column="Text",
        sa_imports=("Text",),
        column=Text(),
        schema={"type": "string", "format": "uri"},
        sample="https://example.com",
        default="",
    ),
    FieldType.UUID: TypeMapping(
        python_type="UUID",
        python_imports=("from uuid import UUID",),
        sa_column="Uuid",
        sa_imports=("Uuid",),
        column=Uuid(),
        schema={"type": "string", "format": "uuid"},
        sample="123e4567-e89b-12d3-a456-426614174000",
        default=None,
    ),
    FieldType.JSON: TypeMapping(
        python_type="Dict[str, Any]",
        python_imports=("from typing import Any, Dict",),
        sa_column="JSON",
        sa_imports=("JSON",),
        column=JSON().with_variant(JSONB(), "postgresql"),
        schema={"type": "object"},
        sample={"key": "value"},
        default={},
    ),
    FieldType.TEXT: TypeMapping(
        python_type="str",
        python_imports=(),
        sa_column="Text",
        sa_imports=("Text",),
        column=Text(),
        schema={"type": "string"},
        sample="test text content",
        default="",
    ),
    FieldType.INTEGER: TypeMapping(
        python_type="int",
        python_imports=(),
        sa_column="Integer",
        sa_imports=("Integer",),
        column=Integer(),
        schema={"type": "integer"},
        sample=42,
        default=0,
    ),
    FieldType.FLOAT: TypeMapping(
        python_type="float",
        python_imports=(),
        sa_column="REAL",
        sa_imports=("REAL",),
        column=REAL(),
        schema={"type": "number", "format": "float"},
        sample=42.5,
        default=0.0,
    ),
    FieldType.DECIMAL: TypeMapping(
        python_type="Decimal",
        python_imports=("from decimal import Decimal",),
        sa_column="DECIMAL",
        sa_imports=("DECIMAL",),
        column=DECIMAL(),
        schema={"type": "number", "format": "double"},
        sample=42.99,
        default=0,
    ),
}

DIALECTS = {
    "postgresql": postgresql.dialect(),
    "mysql": mysql.dialect(),
    "sqlite": sqlite.dialect(),
}


def get_type_mapping(field_type: Union[FieldType, str]) -> TypeMapping:
    try:
        return TYPE_MAP[FieldType(field_type)]
    except (KeyError, ValueError):
        raise UnsupportedFieldTypeError(str(field_type)) from None


def python_type(field_type) -> str:
    return get_type_mapping(field_type).python_type


def column_type(field_type, dialect: str = "postgresql") -> str:
    """Column type as the given SQL dialect spells it, e.g. VARCHAR(255)"""
    column = get_type_mapping(field_type).column
    return column.compile(dialect=get_dialect(dialect))


def openapi_schema(field_type) -> Dict[str, str]:
    return dict(get_type_mapping(field_type).schema)


def sample_value(field_type) -> Any:
    return deepcopy(get_type_mapping(field_type).sample)


def default_value(field_type) -> Any:
    return deepcopy(get_type_mapping(field_type).default)


def get_dialect(name: str):
    if name not in DIALECTS:
        raise ValueError(f"Unsupported SQL dialect: {name}")
    return DIALECTS[name]
