from apiforge.schemas import AuthType, GenerationOptions, default_auth_config
from apiforge.services import EndpointService
from apiforge.services.emitters import SourceEmitter, project_context


def bundle(model, options=None):
    options = options or GenerationOptions()
    auth_config = default_auth_config(options.authentication)
    context = project_context(options, auth_config, [model])
    crud = EndpointService().synthesize(model, auth_config)
    return {f.path: f for f in SourceEmitter().emit_crud_bundle(model, crud, options, context)}


class TestTypeDefinition:
    def test_request_and_response_models(self, user_model):
        options = GenerationOptions()
        context = project_context(options, default_auth_config(), [user_model])
        generated = SourceEmitter().emit_type_definition(user_model, context)

        assert generated.path == "app/schemas/user.py"
        content = generated.content
        assert "from pydantic import EmailStr" in content
        assert "class UserBase(BaseModel):" in content
        assert "    email: EmailStr = Field(...)" in content
        assert "    age: Optional[int] = Field(None)" in content
        assert "class CreateUserRequest(UserBase):" in content
        assert "class UpdateUserRequest(BaseModel):" in content
        assert "class UserListResponse(BaseModel):" in content
        assert "    id: UUID" in content


class TestCrudBundle:
    def test_bundle_paths(self, user_model):
        files = bundle(user_model)
        assert sorted(files) == [
            "app/controllers/user_controller.py",
            "app/repositories/user_repository.py",
            "app/routes/user.py",
            "app/services/user_service.py",
            "app/validation/user_validation.py",
            "tests/test_user.py",
        ]

    def test_tests_are_optional(self, user_model):
        files = bundle(user_model, GenerationOptions(include_tests=False))
        assert "tests/test_user.py" not in files

    def test_routes_carry_protection(self, user_model):
        routes = bundle(user_model)["app/routes/user.py"].content

        assert '@router.get("/user/{id}", response_model=UserResponse, summary="Get a User by ID")' in routes
        assert 'dependencies=[Depends(authorize("admin", "user"))]' in routes
        assert 'dependencies=[Depends(authorize("admin"))]' in routes
        assert "def list_users(" in routes

    def test_routes_without_auth_bundle(self, user_model):
        routes = bundle(user_model, GenerationOptions(authentication=AuthType.SESSION))["app/routes/user.py"].content
        assert "authorize" not in routes
        assert "Depends(get_controller)" in routes

    def test_validation_rules(self, user_model):
        validation = bundle(user_model)["app/validation/user_validation.py"].content
        assert "USER_RULES = {" in validation
        assert '{"type": "maxLength", "value": 100, "message": None}' in validation
        assert "def validate_user(" in validation
