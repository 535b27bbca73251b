from typing import List, Optional, Sequence
import json
import uuid

from ..exceptions import GenerationError, ModelValidationError
from ..schemas.auth import AuthConfig, AuthType, default_auth_config
from ..schemas.model import Model
from ..schemas.project import GeneratedFile, GeneratedProject, GenerationOptions
from ..utils.logger import get_logger
from .emitters import (
    AuthEmitter,
    DocumentationEmitter,
    ScaffoldEmitter,
    SchemaEmitter,
    SourceEmitter,
    project_context,
)
from .endpoint_service import EndpointService
from .model_validation_service import ModelValidationService

PROJECT_NAMESPACE = uuid.UUID("0b5e3c9a-7d41-5f2e-8c6b-1a9d4e2f7c30")

logger = get_logger(__name__)


def project_id(models: Sequence[Model], options: GenerationOptions, auth_config: AuthConfig) -> str:
    """uuid5 over the canonical JSON of the generation inputs"""
    payload = {
        "models": [m.model_dump(mode="json", exclude={"created_at", "updated_at"}) for m in models],
        "options": options.model_dump(mode="json"),
        "auth": auth_config.model_dump(mode="json"),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return str(uuid.uuid5(PROJECT_NAMESPACE, canonical))


class ProjectService:
    def __init__(self):
        self.validator = ModelValidationService()
        self.endpoints = EndpointService()
        self.scaffold = ScaffoldEmitter()
        self.schema = SchemaEmitter(self.scaffold.env)
        self.source = SourceEmitter(self.scaffold.env)
        self.auth = AuthEmitter(self.scaffold.env, self.schema)
        self.docs = DocumentationEmitter(self.scaffold.env)

    def generate_project(self, models: Sequence[Model], options: Optional[GenerationOptions] = None,
                         auth_config: Optional[AuthConfig] = None, validate: bool = True) -> GeneratedProject:
        """Run every emitter over the models and collect the files into one project snapshot"""
        options = options or GenerationOptions()
        auth_config = auth_config or default_auth_config(options.authentication)
        models = list(models)
        log = logger.bind(project=options.project_name, models=len(models))

        if validate:
            result = self.validator.validate_models(models, authentication=options.authentication)
            if not result.is_valid:
                log.warning("model_validation_failed", errors=result.error_codes())
                raise ModelValidationError(result)
            if result.warnings:
                log.info("model_validation_warnings", warnings=result.warning_codes())

        crud = {m.name: self.endpoints.synthesize(m, auth_config) for m in models}
        endpoints = [endpoint for m in models for endpoint in crud[m.name]]
        auth_bundle = options.authentication == AuthType.JWT
        if auth_bundle:
            endpoints.extend(self.endpoints.auth_endpoints())

        context = project_context(options, auth_config, models)
        files: List[GeneratedFile] = []

        files.extend(self.scaffold.emit_scaffold(options, endpoints, context))

        files.append(self.schema.emit_database_module(options))
        for model in models:
            if options.database.is_relational:
                files.append(self.schema.emit_orm_model(model))
                files.append(self.schema.emit_model_schema(model, options))
            files.append(self.source.emit_type_definition(model, context))
        if options.database.is_relational:
            relationships = self.schema.emit_relationship_schema(models, options)
            if relationships is not None:
                files.append(relationships)

        if auth_bundle:
            files.extend(self.auth.emit_bundle(auth_config, self.endpoints.auth_endpoints(), options, context))

        for model in models:
            files.extend(self.source.emit_crud_bundle(model, crud[model.name], options, context))

        files.extend(self.scaffold.emit_middleware(context))
        files.append(self.scaffold.emit_entry(context))

        if options.include_documentation:
            document = self.docs.build_openapi_document(models, endpoints, auth_config)
            files.extend(self.docs.emit_documentation(document))
        else:
            document = self.docs.minimal_document()

        self._check_unique(files)
        project = GeneratedProject(
            id=project_id(models, options, auth_config),
            name=options.project_name,
            models=tuple(models),
            endpoints=tuple(endpoints),
            auth_config=auth_config,
            files=tuple(files),
            open_api_spec=document,
            generation_options=options,
        )
        log.info("project_generated", project_id=project.id, files=len(files), endpoints=len(endpoints))
        return project

    def _check_unique(self, files: Sequence[GeneratedFile]):
        seen = set()
        for generated in files:
            if generated.path in seen:
                raise GenerationError(f"Duplicate file path: {generated.path}")
            seen.add(generated.path)
