from pydantic import Field as PydanticField
from datetime import datetime
from typing import Any, Optional, Tuple, Union
import enum
import uuid

from .base import FrozenCamelModel

FIELD_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"
MODEL_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"


class FieldType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    UUID = "uuid"
    JSON = "json"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"


class RelationshipType(str, enum.Enum):
    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_MANY = "manyToMany"


class ValidationRuleType(str, enum.Enum):
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    CUSTOM = "custom"


def _new_id() -> str:
    return str(uuid.uuid4())


class ValidationRule(FrozenCamelModel):
    type: ValidationRuleType
    value: Union[int, float, str]
    message: Optional[str] = None


class Field(FrozenCamelModel):
    id: str = PydanticField(default_factory=_new_id)
    name: str = PydanticField(..., min_length=1, max_length=100, pattern=FIELD_NAME_PATTERN)
    type: FieldType
    required: bool = False
    unique: bool = False
    default_value: Optional[Any] = None
    validation: Tuple[ValidationRule, ...] = ()
    description: Optional[str] = None


class Relationship(FrozenCamelModel):
    id: str = PydanticField(default_factory=_new_id)
    type: RelationshipType
    source_model: str
    target_model: str
    source_field: str
    target_field: str
    cascade_delete: bool = False


class ModelMetadata(FrozenCamelModel):
    table_name: Optional[str] = None
    timestamps: bool = True
    soft_delete: bool = False
    description: Optional[str] = None
    requires_auth: bool = True
    allowed_roles: Tuple[str, ...] = ()


class Model(FrozenCamelModel):
    id: str = PydanticField(default_factory=_new_id)
    name: str = PydanticField(..., min_length=1, max_length=100, pattern=MODEL_NAME_PATTERN)
    fields: Tuple[Field, ...] = ()
    relationships: Tuple[Relationship, ...] = ()
    metadata: ModelMetadata = PydanticField(default_factory=ModelMetadata)
    created_at: datetime = PydanticField(default_factory=datetime.utcnow)
    updated_at: datetime = PydanticField(default_factory=datetime.utcnow)

    def get_field(self, name: str) -> Optional[Field]:
        for field in self.fields:
            if field.name == name:
                return field
        return None
