from pydantic import ValidationError
from collections import deque
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union
import keyword
import re

from ..schemas.auth import AuthType
from ..schemas.model import Field, FieldType, Model, ValidationRuleType
from ..schemas.validation import ValidationResult
from ..utils.logger import get_logger
from ..utils.naming import route_segment
from .endpoint_service import AUTH_ROUTE_SEGMENT

logger = get_logger(__name__)

PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
LOWER_START = re.compile(r"^[a-z][a-zA-Z0-9_]*$")
STRING_LIKE_TYPES = (FieldType.STRING, FieldType.TEXT)


def implicit_columns(model: Model) -> Tuple[str, ...]:
    """Columns every emitted table gets regardless of the declared fields"""
    columns = []
    if model.metadata.timestamps:
        columns += ["created_at", "updated_at"]
    if model.metadata.soft_delete:
        columns.append("deleted_at")
    return tuple(columns)


class ModelValidationService:
    """Aggregating checks over models and relationships.

    Nothing here raises on bad input: every problem is collected as a
    (field, message, code) issue and the caller decides what to do.
    """

    def validate_model(self, model: Union[Model, Mapping[str, Any]]) -> ValidationResult:
        """Validate a single model's shape and naming"""
        result = ValidationResult()

        if not isinstance(model, Model):
            try:
                model = Model.model_validate(model)
            except ValidationError as e:
                for error in e.errors():
                    location = ".".join(str(part) for part in error["loc"]) or "model"
                    result.add_error(location, error["msg"], "SCHEMA_VALIDATION_ERROR")
                return result

        if not PASCAL_CASE.match(model.name):
            result.add_warning(
                "name",
                "Model name should be in PascalCase (e.g., User, BlogPost)",
                "NAMING_CONVENTION_WARNING",
            )

        if not model.fields:
            result.add_error("fields", "Model must have at least one field", "NO_FIELDS_ERROR")

        seen = set()
        reserved = implicit_columns(model)
        for index, field in enumerate(model.fields):
            path = f"fields[{index}]"
            if field.name in seen:
                result.add_error(
                    f"{path}.name",
                    f'Duplicate field name "{field.name}"',
                    "DUPLICATE_FIELD_NAME",
                )
            seen.add(field.name)
            if field.name in reserved:
                result.add_error(
                    f"{path}.name",
                    f'"{field.name}" is added automatically to every {model.name} row and cannot be declared',
                    "RESERVED_COLUMN_NAME",
                )
            result.merge(self.validate_field(field), prefix=f"{path}.")

        if model.fields and not any(f.name == "id" and f.type == FieldType.UUID for f in model.fields):
            result.add_warning(
                "fields",
                'Consider adding an "id" field of type uuid as the primary key',
                "NO_PRIMARY_KEY_WARNING",
            )

        return result

    def validate_field(self, field: Field) -> ValidationResult:
        result = ValidationResult()

        if keyword.iskeyword(field.name):
            result.add_error(
                "name",
                f'"{field.name}" is a reserved word and cannot be used as a field name',
                "RESERVED_FIELD_NAME",
            )
        elif not LOWER_START.match(field.name):
            result.add_warning(
                "name",
                "Field name should start with a lowercase letter (e.g., firstName, created_at)",
                "FIELD_NAMING_CONVENTION_WARNING",
            )

        rule_types = {rule.type for rule in field.validation}
        if field.type == FieldType.EMAIL and ValidationRuleType.PATTERN not in rule_types:
            result.add_warning(
                "validation",
                "Email fields should have pattern validation",
                "MISSING_EMAIL_VALIDATION",
            )
        if field.type in STRING_LIKE_TYPES and ValidationRuleType.MAX_LENGTH not in rule_types:
            result.add_warning(
                "validation",
                "String fields should have a maximum length",
                "MISSING_STRING_VALIDATION",
            )

        return result

    def validate_model_relationships(self, models: Sequence[Model]) -> ValidationResult:
        """Cross-model referential integrity over a whole model set"""
        result = ValidationResult()
        index: Dict[str, Model] = {}

        for model in models:
            if model.name in index:
                result.add_error(
                    model.name,
                    f'Duplicate model name "{model.name}"',
                    "DUPLICATE_MODEL_NAMES",
                )
            else:
                index[model.name] = model

            names = [f.name for f in model.fields]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                result.add_error(
                    f"{model.name}.fields",
                    f"Duplicate field names: {', '.join(duplicates)}",
                    "DUPLICATE_FIELD_NAMES",
                )

        for model in models:
            for rel in model.relationships:
                path = f"{model.name}.relationships.{rel.id}"

                if rel.source_model != model.name:
                    result.add_warning(
                        path,
                        f'Relationship declared on "{model.name}" names "{rel.source_model}" as its source',
                        "SOURCE_MODEL_MISMATCH",
                    )

                if model.get_field(rel.source_field) is None:
                    result.add_error(
                        path,
                        f'Source field "{rel.source_field}" not found in model "{model.name}"',
                        "INVALID_SOURCE_FIELD",
                    )

                target = index.get(rel.target_model)
                if target is None:
                    result.add_error(
                        path,
                        f'Target model "{rel.target_model}" not found',
                        "INVALID_TARGET_MODEL",
                    )
                elif target.get_field(rel.target_field) is None:
                    result.add_error(
                        path,
                        f'Target field "{rel.target_field}" not found in model "{rel.target_model}"',
                        "INVALID_TARGET_FIELD",
                    )

        for model_name, rel_id, cycle in self._find_cycles(models, index):
            result.add_warning(
                f"{model_name}.relationships.{rel_id}",
                f"Circular relationship: {' -> '.join(cycle)}",
                "CIRCULAR_RELATIONSHIP",
            )

        return result

    def validate_models(self, models: Sequence[Union[Model, Mapping[str, Any]]],
                        authentication: Optional[AuthType] = None) -> ValidationResult:
        """Validate each model, then the relationships between them.

        With jwt authentication the auth bundle owns the /auth routes, so a
        model that would be served under the same prefix is an error.
        """
        result = ValidationResult()
        parsed: List[Model] = []

        for i, model in enumerate(models):
            result.merge(self.validate_model(model), prefix=f"models[{i}].")
            if isinstance(model, Model):
                parsed.append(model)
            else:
                try:
                    parsed.append(Model.model_validate(model))
                except ValidationError:
                    continue

            if authentication == AuthType.JWT and route_segment(parsed[-1].name) == AUTH_ROUTE_SEGMENT:
                result.add_error(
                    f"models[{i}].name",
                    f'Model "{parsed[-1].name}" would be served under /{AUTH_ROUTE_SEGMENT}, which the auth bundle owns',
                    "RESERVED_ROUTE",
                )

        result.merge(self.validate_model_relationships(parsed))

        if not result.is_valid:
            logger.info("model_validation_failed", errors=len(result.errors), warnings=len(result.warnings))
        return result

    def _find_cycles(self, models: Sequence[Model], index: Dict[str, Model]) -> Iterator[Tuple[str, str, List[str]]]:
        """Yield (model, relationship id, path) for each relationship that closes a cycle.

        Strongly connected components are found first; a relationship closes a
        cycle when it is a self-loop or its ends share a component, and the path
        reported is the shortest way back to its source inside that component.
        """
        graph = {
            name: [rel.target_model for rel in model.relationships if rel.target_model in index]
            for name, model in index.items()
        }
        component = self._components(graph)
        for model in models:
            for rel in model.relationships:
                if rel.target_model not in index or component[rel.target_model] != component[model.name]:
                    continue
                path = self._shortest_path(graph, component, rel.target_model, model.name)
                yield model.name, rel.id, [model.name] + path

    @staticmethod
    def _components(graph: Dict[str, List[str]]) -> Dict[str, int]:
        """Kosaraju's algorithm, iterative so deep graphs do not hit the recursion limit"""
        order: List[str] = []
        visited: Set[str] = set()
        for root in graph:
            if root in visited:
                continue
            visited.add(root)
            stack = [(root, iter(graph[root]))]
            while stack:
                node, targets = stack[-1]
                for target in targets:
                    if target not in visited:
                        visited.add(target)
                        stack.append((target, iter(graph[target])))
                        break
                else:
                    stack.pop()
                    order.append(node)

        reverse: Dict[str, List[str]] = {name: [] for name in graph}
        for source, targets in graph.items():
            for target in targets:
                reverse[target].append(source)

        component: Dict[str, int] = {}
        for label, root in enumerate(reversed(order)):
            if root in component:
                continue
            component[root] = label
            pending = [root]
            while pending:
                node = pending.pop()
                for source in reverse[node]:
                    if source not in component:
                        component[source] = label
                        pending.append(source)
        return component

    @staticmethod
    def _shortest_path(graph: Dict[str, List[str]], component: Dict[str, int], start: str, goal: str) -> List[str]:
        """Breadth-first path from start to goal, staying inside their component"""
        label = component[start]
        previous: Dict[str, Optional[str]] = {start: None}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            if node == goal:
                break
            for target in graph[node]:
                if target not in previous and component[target] == label:
                    previous[target] = node
                    queue.append(target)
        path = []
        step: Optional[str] = goal
        while step is not None:
            path.append(step)
            step = previous[step]
        return path[::-1]
