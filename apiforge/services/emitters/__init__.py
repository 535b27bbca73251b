from .auth import AuthEmitter
from .base import Emitter, get_environment, model_context, project_context
from .documentation import DocumentationEmitter
from .scaffold import ScaffoldEmitter
from .schema import SchemaEmitter
from .source import SourceEmitter

__all__ = [
    "Emitter",
    "AuthEmitter",
    "DocumentationEmitter",
    "ScaffoldEmitter",
    "SchemaEmitter",
    "SourceEmitter",
    "get_environment",
    "model_context",
    "project_context",
]
