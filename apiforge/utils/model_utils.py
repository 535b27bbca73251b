from datetime import datetime
from typing import Iterable, List, Optional
import re

from ..schemas.model import (
    FIELD_NAME_PATTERN,
    Field,
    FieldType,
    Model,
    ModelMetadata,
    Relationship,
    RelationshipType,
)

PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")


def create_model(name: str, fields: Iterable[Field] = (), metadata: Optional[ModelMetadata] = None) -> Model:
    return Model(name=name, fields=tuple(fields), metadata=metadata or ModelMetadata())


def create_field(name: str, type: FieldType, **kwargs) -> Field:
    return Field(name=name, type=type, **kwargs)


def create_relationship(
    type: RelationshipType,
    source_model: str,
    target_model: str,
    source_field: str,
    target_field: str,
    cascade_delete: bool = False,
) -> Relationship:
    return Relationship(
        type=type,
        source_model=source_model,
        target_model=target_model,
        source_field=source_field,
        target_field=target_field,
        cascade_delete=cascade_delete,
    )


def _touch(model: Model, **changes) -> Model:
    changes["updated_at"] = datetime.utcnow()
    return model.model_copy(update=changes)


def add_field_to_model(model: Model, field: Field) -> Model:
    return _touch(model, fields=model.fields + (field,))


def update_field_in_model(model: Model, field_id: str, **updates) -> Model:
    fields = tuple(
        f.model_copy(update=updates) if f.id == field_id else f
        for f in model.fields
    )
    return _touch(model, fields=fields)


def remove_field_from_model(model: Model, field_id: str) -> Model:
    return _touch(model, fields=tuple(f for f in model.fields if f.id != field_id))


def add_relationship_to_model(model: Model, relationship: Relationship) -> Model:
    return _touch(model, relationships=model.relationships + (relationship,))


def update_relationship_in_model(model: Model, relationship_id: str, **updates) -> Model:
    relationships = tuple(
        r.model_copy(update=updates) if r.id == relationship_id else r
        for r in model.relationships
    )
    return _touch(model, relationships=relationships)


def remove_relationship_from_model(model: Model, relationship_id: str) -> Model:
    return _touch(
        model,
        relationships=tuple(r for r in model.relationships if r.id != relationship_id),
    )


def get_related_models(model: Model, all_models: Iterable[Model]) -> List[Model]:
    targets = {r.target_model for r in model.relationships}
    return [m for m in all_models if m.name in targets]


def is_valid_field_name(name: str) -> bool:
    return bool(re.match(FIELD_NAME_PATTERN, name)) and len(name) <= 100


def is_valid_model_name(name: str) -> bool:
    return bool(PASCAL_CASE.match(name)) and len(name) <= 100
