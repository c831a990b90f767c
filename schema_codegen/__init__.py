"""
Schema Codegen

Generates model code in various languages from relational database schemas.
"""

from .registry import (
    LanguageRegistry,
    get_language_info,
    get_registry,
    list_all_language_info,
    list_supported_languages,
)
from .core import (
    CodegenConfig,
    CodegenError,
    DatabaseSchema,
    GenerationReport,
    build_schema,
    generate,
    load_config,
)

# Version info
__version__ = "0.1.0"


def quick_generate(raw_tables, dialect="sqlite", languages=("typescript",), **options):
    """
    Quick code generation from raw table data, without writing files.

    Args:
        raw_tables: ``(table_name, columns)`` pairs as accepted by build_schema
        dialect: Source database dialect
        languages: Target languages
        **options: Configuration mapping applied over the defaults

    Returns:
        Dict of ``{language: {table: code}}`` for every rendered pair
    """
    schema = build_schema(dialect, raw_tables)
    config = load_config(custom_config=options or None)
    report = generate(schema, config, languages=list(languages))

    if report.has_failures:
        first = report.failed[0]
        raise CodegenError(
            f"Code generation failed for {first.language}/{first.table}: {first.error}"
        )

    code = {}
    for outcome in report.rendered:
        code.setdefault(outcome.language, {})[outcome.table] = outcome.text
    return code


__all__ = [
    "LanguageRegistry",
    "CodegenConfig",
    "CodegenError",
    "DatabaseSchema",
    "GenerationReport",
    "build_schema",
    "generate",
    "load_config",
    "get_registry",
    "get_language_info",
    "list_all_language_info",
    "list_supported_languages",
    "quick_generate",
]
