"""
Render context assembly.

Builds the per-table, per-language data handed to templates: converted
names, resolved types, expanded tags and the untouched original column
metadata.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..logging_config import get_logger
from .config import LanguageConfig, NamingConventions
from .naming import convert
from .schema import Column, Dialect, Table
from .tags import TagExpansionWarning, expand, join_tags
from .types import TypeMappingResolver

logger = get_logger(__name__)


@dataclass
class ColumnContext:
    """Resolved values of one column for one language."""

    field_name: str
    lang_type: str
    base_type: str
    original_column_name: str
    is_nullable: bool = False
    column_comment: Optional[str] = None
    default_value: Optional[str] = None
    is_primary_key: bool = False
    lang_tags: List[str] = field(default_factory=list)
    lang_tags_string: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "FieldName": self.field_name,
            "LangType": self.lang_type,
            "BaseType": self.base_type,
            "LangTags": list(self.lang_tags),
            "LangTagsString": self.lang_tags_string,
            "IsNullable": self.is_nullable,
            "OriginalColumnName": self.original_column_name,
            "ColumnComment": self.column_comment,
            "DefaultValue": self.default_value,
            "IsPrimaryKey": self.is_primary_key,
        }


@dataclass
class RenderContext:
    """Everything a template needs to render one table for one language."""

    struct_name: str
    table_name: str
    current_language: str
    package_name: Optional[str] = None
    imports: List[str] = field(default_factory=list)
    columns: List[ColumnContext] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Template variables, keyed the way templates refer to them."""
        return {
            "StructName": self.struct_name,
            "TableName": self.table_name,
            "PackageName": self.package_name,
            "CurrentLanguage": self.current_language,
            "Imports": list(self.imports),
            "Columns": [column.to_dict() for column in self.columns],
            "Config": dict(self.config),
            "Custom": dict(self.custom),
        }


@dataclass
class AssembledContext:
    """A render context plus the non-fatal issues found while building it."""

    context: RenderContext
    tag_warnings: List[TagExpansionWarning] = field(default_factory=list)
    degraded_types: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [str(w) for w in self.tag_warnings] + list(self.degraded_types)


class RenderContextAssembler:
    """Combines naming, type resolution and tag expansion for one table."""

    def __init__(self, naming: NamingConventions, resolver: TypeMappingResolver):
        self.naming = naming
        self.resolver = resolver

    def struct_name(self, table: Table, language: LanguageConfig) -> str:
        case = language.struct_name_case or self.naming.table_to_struct_case
        return convert(table.name, case)

    def field_name(self, column: Column, language: LanguageConfig) -> str:
        case = language.field_name_case or self.naming.column_to_field_case
        return (language.field_prefix or "") + convert(column.name, case)

    def assemble(
        self, table: Table, language: LanguageConfig, dialect: "Dialect | str"
    ) -> AssembledContext:
        """
        Build a fresh render context.

        Raises:
            UnmappedTypeError: If a column type cannot be resolved
            CaseConversionError: If a table or column name cannot be converted
        """
        struct_name = self.struct_name(table, language)
        imports: List[str] = list(language.default_imports)
        columns: List[ColumnContext] = []
        assembled = AssembledContext(
            context=RenderContext(
                struct_name=struct_name,
                table_name=table.name,
                current_language=language.name,
                package_name=language.package_name,
                config={
                    "nullable_strategy": language.nullable_strategy.value,
                    "field_prefix": language.field_prefix,
                    "struct_name_case": (
                        language.struct_name_case or self.naming.table_to_struct_case
                    ).value,
                    "field_name_case": (
                        language.field_name_case or self.naming.column_to_field_case
                    ).value,
                },
                custom=dict(language.custom),
            )
        )

        for column in table.columns:
            resolved = self.resolver.resolve(
                dialect, column.raw_type, language, nullable=column.nullable
            )
            if resolved.degraded:
                assembled.degraded_types.append(
                    f"Column '{table.name}.{column.name}' type '{column.raw_type}' "
                    f"resolved to '{resolved.base}' via {resolved.source.value}"
                )
            imports.extend(resolved.imports)

            column_context = ColumnContext(
                field_name=self.field_name(column, language),
                lang_type=resolved.lang_type,
                base_type=resolved.base,
                original_column_name=column.name,
                is_nullable=column.nullable,
                column_comment=column.comment,
                default_value=column.default_value,
                is_primary_key=column.is_primary_key,
            )

            if language.tags:
                expansion = expand(
                    language.tags,
                    {
                        **column_context.to_dict(),
                        "StructName": struct_name,
                        "TableName": table.name,
                    },
                )
                column_context.lang_tags = expansion.tags
                column_context.lang_tags_string = join_tags(
                    expansion.tags, language.tag_separator, language.tag_wrapper
                )
                assembled.tag_warnings.extend(expansion.warnings)

            columns.append(column_context)

        assembled.context.columns = columns
        assembled.context.imports = list(dict.fromkeys(imports))

        logger.debug(
            f"Assembled {language.name} context for {table.name} with {len(columns)} columns"
        )
        return assembled
