import pytest

from apiforge.exceptions import GenerationError, ModelValidationError
from apiforge.schemas import AuthType, FieldType, FileType, GenerationOptions
from apiforge.utils.model_utils import create_field, create_model


class TestGenerateProject:
    def test_project_shape(self, blog_project):
        assert blog_project.name == "blog-api"
        assert len(blog_project.endpoints) == 15
        assert blog_project.uses_auth_bundle
        paths = {f.path for f in blog_project.files}
        assert {
            "requirements.txt",
            "app/main.py",
            "app/database.py",
            "app/models/user.py",
            "app/schemas/post.py",
            "schema/users.sql",
            "schema/relationships.sql",
            "schema/auth_users.sql",
            "app/auth/service.py",
            "app/routes/post.py",
            "app/middleware/logging.py",
            "docs/openapi.json",
            "tests/test_user.py",
        } <= paths

    def test_paths_are_unique(self, blog_project):
        paths = [f.path for f in blog_project.files]
        assert len(paths) == len(set(paths))

    def test_deterministic(self, project_service, blog_models):
        options = GenerationOptions(project_name="blog-api")
        first = project_service.generate_project(blog_models, options)
        second = project_service.generate_project(blog_models, options)

        assert first.id == second.id
        assert [e.id for e in first.endpoints] == [e.id for e in second.endpoints]
        assert [(f.path, f.content) for f in first.files] == [(f.path, f.content) for f in second.files]

    def test_id_depends_on_options(self, project_service, blog_models):
        first = project_service.generate_project(blog_models, GenerationOptions(project_name="blog-api"))
        second = project_service.generate_project(blog_models, GenerationOptions(project_name="blog-two"))
        assert first.id != second.id

    def test_openapi_document_attached(self, blog_project):
        assert "/user/{id}" in blog_project.open_api_spec["paths"]

    def test_auth_bundle_only_for_jwt(self, project_service, blog_models):
        project = project_service.generate_project(blog_models, GenerationOptions(authentication=AuthType.SESSION))
        paths = {f.path for f in project.files}

        assert not any(path.startswith("app/auth/") for path in paths)
        assert "schema/auth_users.sql" not in paths
        assert len(project.endpoints) == 10
        assert project.auth_config.type == AuthType.SESSION

    def test_model_named_auth_with_session_auth(self, project_service, user_model):
        auth = user_model.model_copy(update={"name": "Auth"})
        project = project_service.generate_project([auth], GenerationOptions(authentication=AuthType.SESSION))

        assert "/auth/{id}" in project.open_api_spec["paths"]
        assert "app/routes/auth.py" in {f.path for f in project.files}
        assert all(e.auth_action is None for e in project.endpoints)

    def test_requirements_pin_bcrypt_for_passlib(self, blog_project, project_service, blog_models):
        requirements = blog_project.get_file("requirements.txt").content.splitlines()
        assert "passlib[bcrypt]>=1.7" in requirements
        assert "bcrypt>=4.0,<4.1" in requirements

        project = project_service.generate_project(blog_models, GenerationOptions(authentication=AuthType.SESSION))
        assert "bcrypt" not in project.get_file("requirements.txt").content

    def test_without_documentation(self, project_service, blog_models):
        project = project_service.generate_project(blog_models, GenerationOptions(include_documentation=False))

        assert not any(f.type == FileType.DOCUMENTATION and f.path.startswith("docs/") for f in project.files)
        assert project.open_api_spec["paths"] == {}

    def test_without_tests(self, project_service, blog_models):
        project = project_service.generate_project(blog_models, GenerationOptions(include_tests=False))
        assert not any(f.type == FileType.TEST for f in project.files)

    def test_document_store(self, project_service, blog_models):
        project = project_service.generate_project(blog_models, GenerationOptions(database="mongodb"))
        paths = {f.path for f in project.files}

        assert not any(path.startswith("app/models/") for path in paths)
        assert "schema/users.sql" not in paths
        assert "schema/relationships.sql" not in paths
        assert "app/schemas/user.py" in paths


class TestValidationGate:
    def test_invalid_models_raise(self, project_service):
        with pytest.raises(ModelValidationError) as exc_info:
            project_service.generate_project([create_model("Empty")])
        assert exc_info.value.result.error_codes() == ["NO_FIELDS_ERROR"]

    def test_model_named_auth_with_jwt_is_rejected(self, project_service, user_model):
        auth = user_model.model_copy(update={"name": "Auth"})
        with pytest.raises(ModelValidationError) as exc_info:
            project_service.generate_project([auth])
        assert exc_info.value.result.error_codes() == ["RESERVED_ROUTE"]

    def test_declared_timestamp_field_is_rejected(self, project_service, user_model):
        clash = user_model.model_copy(update={"fields": user_model.fields + (create_field("created_at", FieldType.DATE),)})
        with pytest.raises(ModelValidationError) as exc_info:
            project_service.generate_project([clash])
        assert exc_info.value.result.error_codes() == ["RESERVED_COLUMN_NAME"]

    def test_schema_name_clash_is_a_generation_error(self, project_service, user_model):
        clash = user_model.model_copy(update={"name": "ErrorResponse"})
        with pytest.raises(GenerationError, match="ErrorResponse"):
            project_service.generate_project([clash])

    def test_validation_can_be_skipped(self, project_service, user_model):
        duplicate = [user_model, user_model.model_copy(update={"id": "other"})]
        with pytest.raises(ModelValidationError):
            project_service.generate_project(duplicate)

        project = project_service.generate_project([create_model("Empty")], validate=False)
        assert "app/schemas/empty.py" in {f.path for f in project.files}
