from typing import Dict, List, Optional, Sequence
import json

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKeyConstraint,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Uuid,
    func,
    text,
)
from sqlalchemy.schema import AddConstraint, CreateIndex, CreateTable

from ...exceptions import GenerationError
from ...schemas.model import Field, Model, RelationshipType
from ...schemas.project import DatabaseKind, FileType, GeneratedFile, GenerationOptions
from ...utils.naming import snake_case, table_name
from ..model_validation_service import implicit_columns
from .. import type_mapper
from .base import Emitter, model_context, payload_fields


def server_default(value):
    """DEFAULT clause value for a field's default"""
    if isinstance(value, bool):
        return text("true" if value else "false")
    if isinstance(value, (int, float)):
        return text(repr(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def compile_ddl(element, dialect: str) -> str:
    """Compile a DDL construct and tidy SQLAlchemy's whitespace"""
    sql = str(element.compile(dialect=type_mapper.get_dialect(dialect)))
    lines = [line.rstrip().replace("\t", "    ") for line in sql.strip().splitlines()]
    return "\n".join(lines) + ";"


class SchemaEmitter(Emitter):
    """Relational schema (DDL), ORM models and the database connection module"""

    def build_table(self, model: Model, metadata: MetaData, dialect: str = "postgresql") -> Table:
        columns = [self._id_column(dialect)]
        reserved = implicit_columns(model)

        for field in payload_fields(model):
            if field.name in reserved:
                raise GenerationError(f"{model.name}.{field.name} clashes with an automatic column")
            columns.append(self._field_column(field))

        if model.metadata.timestamps:
            columns.append(Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False))
            columns.append(Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False))
        if model.metadata.soft_delete:
            columns.append(Column("deleted_at", DateTime(timezone=True), nullable=True))

        return Table(table_name(model), metadata, *columns)

    def create_table_sql(self, model: Model, dialect: str = "postgresql") -> str:
        """CREATE TABLE statement plus the updated_at trigger"""
        table = self.build_table(model, MetaData(), dialect)
        statements = [f"-- {model.name}", compile_ddl(CreateTable(table), dialect)]
        if model.metadata.timestamps:
            statements.append(self.trigger_sql(table.name, dialect))
        return "\n\n".join(statements) + "\n"

    def trigger_sql(self, table: str, dialect: str) -> str:
        return self.render(f"schema/{dialect}_trigger.sql.j2", table=table).rstrip("\n")

    def render_table(self, table: Table, dialect: str) -> str:
        statements = [compile_ddl(CreateTable(table), dialect)]
        for index in sorted(table.indexes, key=lambda i: i.name):
            statements.append(compile_ddl(CreateIndex(index), dialect))
        return "\n\n".join(statements)

    def relationship_sql(self, models: Sequence[Model], dialect: str = "postgresql") -> Optional[str]:
        """Foreign keys and join tables for the relationships declared across models"""
        metadata = MetaData()
        tables: Dict[str, Table] = {m.name: self.build_table(m, metadata, dialect) for m in models}
        statements: List[str] = []

        for model in models:
            for rel in model.relationships:
                source = tables.get(model.name)
                target = tables.get(rel.target_model)
                if target is None:
                    raise GenerationError(f"Relationship {rel.id} targets unknown model {rel.target_model}")
                source_column = self._column(source, rel.source_field, model.name)
                target_column = self._column(target, rel.target_field, rel.target_model)

                if rel.type == RelationshipType.MANY_TO_MANY:
                    statements.append(self._join_table_sql(metadata, source, source_column, target, target_column, rel, dialect))
                    continue

                constraint = ForeignKeyConstraint(
                    [target_column.name],
                    [source_column],
                    name=f"fk_{target.name}_{target_column.name}".lower(),
                    ondelete="CASCADE" if rel.cascade_delete else None,
                )
                target.append_constraint(constraint)
                statements.append(compile_ddl(AddConstraint(constraint), dialect))

        if not statements:
            return None
        return "-- Relationships\n\n" + "\n\n".join(statements) + "\n"

    def emit_model_schema(self, model: Model, options: GenerationOptions) -> GeneratedFile:
        return GeneratedFile(
            path=f"schema/{table_name(model)}.sql",
            content=self.create_table_sql(model, options.database.value),
            type=FileType.CONFIG,
            language="sql",
        )

    def emit_relationship_schema(self, models: Sequence[Model], options: GenerationOptions) -> Optional[GeneratedFile]:
        content = self.relationship_sql(models, options.database.value)
        if content is None:
            return None
        return GeneratedFile(path="schema/relationships.sql", content=content, type=FileType.CONFIG, language="sql")

    def emit_orm_model(self, model: Model) -> GeneratedFile:
        context = model_context(model)
        extra = ["Column", "Uuid"]
        if model.metadata.timestamps or model.metadata.soft_delete:
            extra.append("DateTime")
        if model.metadata.timestamps:
            extra.append("func")
        return self.emit(
            f"app/models/{context['module']}.py",
            "schema/orm_model.py.j2",
            extra=extra,
            **context,
        )

    def emit_database_module(self, options: GenerationOptions) -> GeneratedFile:
        return self.emit(
            "app/database.py",
            "schema/database.py.j2",
            relational=options.database.is_relational,
            database=options.database.value,
        )

    def _id_column(self, dialect: str) -> Column:
        if dialect == DatabaseKind.POSTGRESQL.value:
            return Column("id", Uuid(), primary_key=True, server_default=text("gen_random_uuid()"))
        return Column("id", Uuid(), primary_key=True)

    def _field_column(self, field: Field) -> Column:
        mapping = type_mapper.get_type_mapping(field.type)
        kwargs = {"nullable": not field.required, "unique": field.unique}
        if field.default_value is not None:
            kwargs["server_default"] = server_default(field.default_value)
        return Column(field.name, mapping.column, **kwargs)

    def _column(self, table: Table, name: str, model_name: str) -> Column:
        if name not in table.c:
            raise GenerationError(f'Field "{name}" not found on model "{model_name}"')
        return table.c[name]

    def _join_table_sql(self, metadata, source, source_column, target, target_column, rel, dialect) -> str:
        left = f"{snake_case(rel.source_model)}_{source_column.name}".lower()
        right = f"{snake_case(rel.target_model)}_{target_column.name}".lower()
        name = f"{source.name}_{target.name}"
        if name in metadata.tables:
            return f"-- {name} already declared"
        join = Table(
            name,
            metadata,
            Column(left, source_column.type, nullable=False),
            Column(right, target_column.type, nullable=False),
            PrimaryKeyConstraint(left, right),
            ForeignKeyConstraint([left], [source_column], ondelete="CASCADE"),
            ForeignKeyConstraint([right], [target_column], ondelete="CASCADE"),
        )
        return compile_ddl(CreateTable(join), dialect)
