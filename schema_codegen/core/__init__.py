"""
Core code generation components.

Schema model, table filtering, naming, type resolution, tag expansion,
render context assembly and the generation orchestrator.
"""

from .errors import CodegenError
from .schema import Column, DatabaseSchema, Dialect, SchemaError, Table, build_schema
from .filters import InvalidPatternError, TableFilter, retain
from .naming import CaseConversionError, NamingCase, convert
from .config import (
    CodegenConfig,
    ConfigError,
    ConfigManager,
    GenerationConfig,
    LanguageConfig,
    NamingConventions,
    NullableStrategy,
    TablePatterns,
    load_config,
    write_default_config,
)
from .types import ResolvedType, ResolutionSource, TypeMappingResolver, UnmappedTypeError
from .tags import TagExpansion, TagExpansionWarning, expand
from .context import RenderContext, RenderContextAssembler
from .templates import TemplateEngine, TemplateError, create_template_engine
from .writer import OutputWriter, WriteError
from .generator import (
    GenerationOrchestrator,
    GenerationReport,
    PairOutcome,
    PairState,
    generate,
)

__all__ = [
    # Errors
    "CodegenError",
    "SchemaError",
    "InvalidPatternError",
    "CaseConversionError",
    "ConfigError",
    "UnmappedTypeError",
    "TemplateError",
    "WriteError",
    "TagExpansionWarning",
    # Schema model
    "Column",
    "Table",
    "DatabaseSchema",
    "Dialect",
    "build_schema",
    # Resolution engine
    "TableFilter",
    "retain",
    "NamingCase",
    "convert",
    "NullableStrategy",
    "ResolvedType",
    "ResolutionSource",
    "TypeMappingResolver",
    "TagExpansion",
    "expand",
    "RenderContext",
    "RenderContextAssembler",
    # Configuration
    "CodegenConfig",
    "ConfigManager",
    "GenerationConfig",
    "LanguageConfig",
    "NamingConventions",
    "TablePatterns",
    "load_config",
    "write_default_config",
    # Output
    "TemplateEngine",
    "create_template_engine",
    "OutputWriter",
    # Orchestration
    "GenerationOrchestrator",
    "GenerationReport",
    "PairOutcome",
    "PairState",
    "generate",
]
