from typing import Any, Dict, List

from ...schemas.model import Model
from ...schemas.project import FileType, GeneratedFile, GenerationOptions
from ..endpoint_service import CRUDEndpoints
from .base import Emitter, model_context


class SourceEmitter(Emitter):
    """Per-model CRUD bundle: type definitions, controller, service, repository, routes, validation, tests"""

    def emit_type_definition(self, model: Model, context: Dict[str, Any]) -> GeneratedFile:
        ctx = {**context, **model_context(model)}
        return self.emit(f"app/schemas/{ctx['module']}.py", "source/schema.py.j2", **ctx)

    def emit_crud_bundle(self, model: Model, endpoints: CRUDEndpoints, options: GenerationOptions,
                         context: Dict[str, Any]) -> List[GeneratedFile]:
        """Controller, service, repository, routes, validation and (optionally) tests for one model"""
        ctx = {**context, **model_context(model), "endpoints": endpoints}
        module = ctx["module"]

        files = [
            self.emit(f"app/controllers/{module}_controller.py", "source/controller.py.j2", **ctx),
            self.emit(f"app/services/{module}_service.py", "source/service.py.j2", **ctx),
            self.emit(f"app/repositories/{module}_repository.py", "source/repository.py.j2", **ctx),
            self.emit(f"app/routes/{module}.py", "source/routes.py.j2", **ctx),
            self.emit(f"app/validation/{module}_validation.py", "source/validation.py.j2", **ctx),
        ]
        if options.include_tests:
            files.append(
                self.emit(f"tests/test_{module}.py", "source/test_routes.py.j2", file_type=FileType.TEST, **ctx)
            )
        return files
