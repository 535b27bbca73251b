import time

from apiforge.schemas import AuthType, FieldType, ModelMetadata, RelationshipType
from apiforge.services import ModelValidationService
from apiforge.utils.model_utils import (
    add_relationship_to_model,
    create_field,
    create_model,
    create_relationship,
)


def codes(issues):
    return [issue.code for issue in issues]


class TestValidateModel:
    def setup_method(self):
        self.service = ModelValidationService()

    def test_valid_model(self, user_model):
        result = self.service.validate_model(user_model)
        assert result.is_valid
        assert result.errors == []

    def test_model_without_fields_is_an_error(self):
        result = self.service.validate_model(create_model("Empty"))
        assert not result.is_valid
        assert codes(result.errors) == ["NO_FIELDS_ERROR"]

    def test_lowercase_model_name_is_a_warning(self):
        model = create_model("user", [create_field("id", FieldType.UUID)])
        result = self.service.validate_model(model)
        assert result.is_valid
        assert "NAMING_CONVENTION_WARNING" in codes(result.warnings)

    def test_duplicate_field_names(self):
        model = create_model("User", [
            create_field("id", FieldType.UUID),
            create_field("age", FieldType.INTEGER),
            create_field("age", FieldType.INTEGER),
        ])
        result = self.service.validate_model(model)
        assert "DUPLICATE_FIELD_NAME" in codes(result.errors)
        assert result.errors[0].field == "fields[2].name"

    def test_reserved_field_name(self):
        model = create_model("Lesson", [create_field("id", FieldType.UUID), create_field("class", FieldType.INTEGER)])
        result = self.service.validate_model(model)
        assert "RESERVED_FIELD_NAME" in codes(result.errors)
        assert result.errors[0].field == "fields[1].name"

    def test_automatic_columns_cannot_be_declared(self):
        fields = [
            create_field("id", FieldType.UUID),
            create_field("created_at", FieldType.DATE),
            create_field("deleted_at", FieldType.DATE),
        ]
        result = self.service.validate_model(create_model("Note", fields))
        assert codes(result.errors) == ["RESERVED_COLUMN_NAME"]
        assert result.errors[0].field == "fields[1].name"

        soft = create_model("Note", fields, ModelMetadata(timestamps=False, soft_delete=True))
        result = self.service.validate_model(soft)
        assert codes(result.errors) == ["RESERVED_COLUMN_NAME"]
        assert result.errors[0].field == "fields[2].name"

    def test_missing_primary_key_warning(self):
        model = create_model("Tag", [create_field("label", FieldType.INTEGER)])
        result = self.service.validate_model(model)
        assert result.is_valid
        assert "NO_PRIMARY_KEY_WARNING" in codes(result.warnings)

    def test_string_and_email_rule_warnings(self):
        model = create_model("Contact", [
            create_field("id", FieldType.UUID),
            create_field("email", FieldType.EMAIL),
            create_field("notes", FieldType.TEXT),
        ])
        result = self.service.validate_model(model)
        warning_codes = codes(result.warnings)
        assert "MISSING_EMAIL_VALIDATION" in warning_codes
        assert "MISSING_STRING_VALIDATION" in warning_codes

    def test_malformed_mapping_is_reported_not_raised(self):
        result = self.service.validate_model({"name": "User", "fields": [{"name": "age", "type": "geometry"}]})
        assert not result.is_valid
        assert set(codes(result.errors)) == {"SCHEMA_VALIDATION_ERROR"}

    def test_mapping_input_is_parsed(self):
        result = self.service.validate_model({
            "name": "Tag",
            "fields": [{"name": "id", "type": "uuid"}, {"name": "count", "type": "integer"}],
        })
        assert result.is_valid


class TestValidateRelationships:
    def setup_method(self):
        self.service = ModelValidationService()

    def test_valid_relationship(self, blog_models):
        result = self.service.validate_model_relationships(blog_models)
        assert result.is_valid
        assert result.warnings == []

    def test_unknown_target_model(self, user_model):
        rel = create_relationship(RelationshipType.ONE_TO_MANY, "User", "Comment", "id", "user_id")
        user = add_relationship_to_model(user_model, rel)
        result = self.service.validate_model_relationships([user])
        assert codes(result.errors) == ["INVALID_TARGET_MODEL"]
        assert result.errors[0].field == f"User.relationships.{rel.id}"

    def test_unknown_source_and_target_fields(self, user_model, post_model):
        rel = create_relationship(RelationshipType.ONE_TO_MANY, "User", "Post", "uuid", "writer_id")
        user = add_relationship_to_model(user_model, rel)
        result = self.service.validate_model_relationships([user, post_model])
        assert codes(result.errors) == ["INVALID_SOURCE_FIELD", "INVALID_TARGET_FIELD"]

    def test_duplicate_model_names(self, user_model):
        result = self.service.validate_model_relationships([user_model, user_model])
        assert "DUPLICATE_MODEL_NAMES" in codes(result.errors)

    def test_source_model_mismatch_is_a_warning(self, user_model, post_model):
        rel = create_relationship(RelationshipType.ONE_TO_MANY, "Account", "Post", "id", "author_id")
        user = add_relationship_to_model(user_model, rel)
        result = self.service.validate_model_relationships([user, post_model])
        assert result.is_valid
        assert codes(result.warnings) == ["SOURCE_MODEL_MISMATCH"]

    def test_cycles_are_warnings(self, blog_models):
        user, post = blog_models
        back = create_relationship(RelationshipType.ONE_TO_ONE, "Post", "User", "author_id", "id")
        post = add_relationship_to_model(post, back)
        result = self.service.validate_model_relationships([user, post])
        assert result.is_valid
        assert codes(result.warnings) == ["CIRCULAR_RELATIONSHIP", "CIRCULAR_RELATIONSHIP"]
        assert "User -> Post -> User" in result.warnings[0].message

    def test_self_reference_is_a_cycle(self):
        category = create_model("Category", [
            create_field("id", FieldType.UUID),
            create_field("parent_id", FieldType.UUID),
        ])
        rel = create_relationship(RelationshipType.ONE_TO_MANY, "Category", "Category", "id", "parent_id")
        result = self.service.validate_model_relationships([add_relationship_to_model(category, rel)])
        assert result.is_valid
        assert codes(result.warnings) == ["CIRCULAR_RELATIONSHIP"]


    def test_layered_graph_has_no_cycles(self):
        layers = [[f"L{depth}N{i}" for i in range(10)] for depth in range(5)]
        models = []
        for depth, layer in enumerate(layers):
            for name in layer:
                model = create_model(name, [create_field("id", FieldType.UUID), create_field("parent_id", FieldType.UUID)])
                for target in (layers[depth + 1] if depth + 1 < len(layers) else []):
                    model = add_relationship_to_model(
                        model, create_relationship(RelationshipType.ONE_TO_MANY, name, target, "id", "parent_id")
                    )
                models.append(model)

        started = time.monotonic()
        result = self.service.validate_model_relationships(models)
        assert time.monotonic() - started < 2.0
        assert result.is_valid
        assert result.warnings == []

    def test_cycle_inside_a_large_graph(self):
        names = [f"M{i}" for i in range(60)]
        models = []
        for i, name in enumerate(names):
            model = create_model(name, [create_field("id", FieldType.UUID), create_field("next_id", FieldType.UUID)])
            if i + 1 < len(names):
                model = add_relationship_to_model(
                    model, create_relationship(RelationshipType.ONE_TO_ONE, name, names[i + 1], "id", "next_id")
                )
            models.append(model)
        back = create_relationship(RelationshipType.ONE_TO_ONE, "M12", "M10", "id", "next_id")
        models[12] = add_relationship_to_model(models[12], back)

        result = self.service.validate_model_relationships(models)
        assert codes(result.warnings) == ["CIRCULAR_RELATIONSHIP"] * 3
        assert [w.field.split(".")[0] for w in result.warnings] == ["M10", "M11", "M12"]
        assert "M12 -> M10 -> M11 -> M12" in result.warnings[2].message


class TestValidateModels:
    def test_prefixes_issue_paths(self, user_model):
        service = ModelValidationService()
        result = service.validate_models([user_model, create_model("Empty")])
        assert not result.is_valid
        assert result.errors[0].field == "models[1].fields"

    def test_serializes_camel_case_flag(self, user_model):
        result = ModelValidationService().validate_models([user_model])
        assert result.model_dump(by_alias=True)["isValid"] is True

    def test_auth_route_is_reserved_under_jwt(self, user_model):
        auth = user_model.model_copy(update={"name": "Auth"})
        service = ModelValidationService()

        result = service.validate_models([auth], authentication=AuthType.JWT)
        assert not result.is_valid
        assert codes(result.errors) == ["RESERVED_ROUTE"]
        assert result.errors[0].field == "models[0].name"

        assert service.validate_models([auth], authentication=AuthType.SESSION).is_valid
        assert service.validate_models([auth]).is_valid
