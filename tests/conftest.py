import pytest
from fastapi.testclient import TestClient

from apiforge.main import create_app
from apiforge.schemas import (
    FieldType,
    GenerationOptions,
    RelationshipType,
    ValidationRule,
    ValidationRuleType,
)
from apiforge.services import DeploymentService, ProjectService
from apiforge.utils.model_utils import (
    add_relationship_to_model,
    create_field,
    create_model,
    create_relationship,
)


def max_length(value):
    return (ValidationRule(type=ValidationRuleType.MAX_LENGTH, value=value),)


@pytest.fixture
def user_model():
    """User with a unique required email"""
    return create_model("User", [
        create_field("id", FieldType.UUID, required=True, unique=True),
        create_field(
            "email",
            FieldType.EMAIL,
            required=True,
            unique=True,
            validation=(ValidationRule(type=ValidationRuleType.PATTERN, value=r"^[^@]+@[^@]+$"),),
        ),
        create_field("name", FieldType.STRING, required=True, validation=max_length(100)),
        create_field("age", FieldType.INTEGER),
    ])


@pytest.fixture
def post_model():
    return create_model("Post", [
        create_field("id", FieldType.UUID, required=True, unique=True),
        create_field("title", FieldType.STRING, required=True, validation=max_length(200)),
        create_field("content", FieldType.TEXT, validation=max_length(5000)),
        create_field("author_id", FieldType.UUID, required=True),
        create_field("published", FieldType.BOOLEAN, default_value=False),
    ])


@pytest.fixture
def blog_models(user_model, post_model):
    """User has many posts, deleting a user deletes their posts"""
    relationship = create_relationship(
        RelationshipType.ONE_TO_MANY, "User", "Post", "id", "author_id", cascade_delete=True
    )
    return [add_relationship_to_model(user_model, relationship), post_model]


@pytest.fixture
def project_service():
    return ProjectService()


@pytest.fixture
def blog_project(project_service, blog_models):
    return project_service.generate_project(blog_models, GenerationOptions(project_name="blog-api"))


@pytest.fixture
def deployment_service():
    return DeploymentService(step_delay_scale=0)


@pytest.fixture
def client():
    app = create_app(deployment_service=DeploymentService(step_delay_scale=0))
    with TestClient(app) as test_client:
        yield test_client
