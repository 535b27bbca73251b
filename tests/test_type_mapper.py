import pytest

from apiforge.exceptions import UnsupportedFieldTypeError
from apiforge.schemas import FieldType
from apiforge.services import type_mapper


class TestTypeMapper:
    @pytest.mark.parametrize("field_type, expected", [
        (FieldType.STRING, "str"),
        (FieldType.INTEGER, "int"),
        (FieldType.EMAIL, "EmailStr"),
        (FieldType.UUID, "UUID"),
        (FieldType.DATE, "datetime"),
        (FieldType.DECIMAL, "Decimal"),
        (FieldType.JSON, "Dict[str, Any]"),
    ])
    def test_python_type(self, field_type, expected):
        assert type_mapper.python_type(field_type) == expected

    def test_every_field_type_is_mapped(self):
        for field_type in FieldType:
            mapping = type_mapper.get_type_mapping(field_type)
            assert mapping.schema["type"] in ("string", "number", "integer", "boolean", "object")
            assert mapping.sample is not None

    def test_accepts_plain_strings(self):
        assert type_mapper.python_type("boolean") == "bool"

    def test_unknown_type_raises(self):
        with pytest.raises(UnsupportedFieldTypeError, match="geometry"):
            type_mapper.get_type_mapping("geometry")

    @pytest.mark.parametrize("field_type, dialect, expected", [
        (FieldType.STRING, "postgresql", "VARCHAR(255)"),
        (FieldType.BOOLEAN, "postgresql", "BOOLEAN"),
        (FieldType.INTEGER, "mysql", "INTEGER"),
        (FieldType.UUID, "postgresql", "UUID"),
        (FieldType.JSON, "postgresql", "JSONB"),
        (FieldType.JSON, "mysql", "JSON"),
    ])
    def test_column_type_per_dialect(self, field_type, dialect, expected):
        assert type_mapper.column_type(field_type, dialect) == expected

    def test_unknown_dialect_raises(self):
        with pytest.raises(ValueError, match="oracle"):
            type_mapper.column_type(FieldType.STRING, "oracle")

    def test_openapi_formats(self):
        assert type_mapper.openapi_schema(FieldType.EMAIL) == {"type": "string", "format": "email"}
        assert type_mapper.openapi_schema(FieldType.DATE) == {"type": "string", "format": "date-time"}
        assert type_mapper.openapi_schema(FieldType.INTEGER) == {"type": "integer"}

    def test_samples_are_fixed(self):
        assert type_mapper.sample_value(FieldType.EMAIL) == "test@example.com"
        assert type_mapper.sample_value(FieldType.DATE) == "2024-01-01T00:00:00Z"
        assert type_mapper.sample_value(FieldType.INTEGER) == 42

    def test_mutable_samples_are_copied(self):
        sample = type_mapper.sample_value(FieldType.JSON)
        sample["key"] = "changed"
        assert type_mapper.sample_value(FieldType.JSON) == {"key": "value"}

    def test_schema_is_copied(self):
        schema = type_mapper.openapi_schema(FieldType.EMAIL)
        schema["example"] = "x"
        assert "example" not in type_mapper.openapi_schema(FieldType.EMAIL)
