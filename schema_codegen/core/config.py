"""
Configuration management for code generation.

Handles loading JSON/YAML configuration files and merging them onto the
built-in type mappings and language profiles. The result is an immutable
``CodegenConfig`` value that is passed explicitly to every stage.
"""

import copy
import json
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from ..logging_config import get_logger
from ..registry import LanguageRegistry, get_registry
from .errors import CodegenError
from .mappings import BUILTIN_TYPE_MAPPINGS, TypeMappingTable
from .naming import CaseConversionError, NamingCase
from .schema import Dialect, SchemaError

logger = get_logger(__name__)


class ConfigError(CodegenError):
    """Exception raised for configuration-related errors."""

    pass


class NullableStrategy(Enum):
    """How a language represents a column that may be NULL."""

    OPTION = "option"  # Option<T>
    UNION = "union"  # T | null
    NULLABLE_TYPE = "nullable_type"  # T?
    OPTIONAL_TYPE = "optional_type"  # Optional[T]
    POINTER = "pointer"  # *T
    NATIVE = "native"  # T, the language has its own null

    @classmethod
    def parse(cls, value: "NullableStrategy | str") -> "NullableStrategy":
        """Parse a strategy name, mapping legacy aliases to canonical values."""
        if isinstance(value, NullableStrategy):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = NULLABLE_STRATEGY_ALIASES.get(key, key)
            for strategy in cls:
                if strategy.value == key:
                    return strategy
        valid = ", ".join(s.value for s in cls)
        raise ConfigError(f"Invalid nullable_strategy: {value!r}. Valid: {valid}")


NULLABLE_STRATEGY_ALIASES = {
    "optional": "optional_type",
    "nullable": "nullable_type",
    "nil": "native",
    "generic": "native",
    "optional_property": "native",
}

OUTPUT_STRUCTURES = ("by_language", "by_table", "flat")


@dataclass(frozen=True)
class LanguageConfig:
    """Configuration of one target language."""

    name: str
    nullable_strategy: NullableStrategy = NullableStrategy.NATIVE

    # Naming (None means use the global naming conventions)
    struct_name_case: Optional[NamingCase] = None
    field_name_case: Optional[NamingCase] = None
    field_prefix: Optional[str] = None

    # Output settings
    output_extension: Optional[str] = None
    package_name: Optional[str] = None
    template_file: Optional[str] = None
    template_path: Optional[str] = None
    default_imports: Tuple[str, ...] = ()

    # Tag templates expanded per column
    tags: Tuple[str, ...] = ()
    tag_separator: str = " "
    tag_wrapper: Optional[str] = None  # e.g. "`{tags}`"

    # Type resolution layers
    type_overrides: Dict[str, str] = field(default_factory=dict)
    generic_types: Dict[str, str] = field(default_factory=dict)
    accept_generic_labels: bool = False
    fallback_type: Optional[str] = None
    type_imports: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    # Nullable wrapping, keyed by strategy value
    nullable_formats: Dict[str, str] = field(default_factory=dict)
    nullable_types: Dict[str, Dict[str, str]] = field(default_factory=dict)
    nullable_imports: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    # Unrecognized keys, available to templates
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def extension(self) -> str:
        """Output extension without a leading dot."""
        return (self.output_extension or self.name).lstrip(".")

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "LanguageConfig":
        """
        Build a LanguageConfig from a configuration mapping.

        Raises:
            ConfigError: If a value has the wrong shape
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"Language config for '{name}' must be a mapping")

        known_fields = {f.name for f in fields(cls)} - {"name", "custom"}
        args: Dict[str, Any] = {}
        custom: Dict[str, Any] = dict(data.get("custom") or {})

        for key, value in data.items():
            if key in known_fields:
                args[key] = value
            elif key not in ("custom", "name"):
                custom[key] = value

        try:
            if "nullable_strategy" in args:
                args["nullable_strategy"] = NullableStrategy.parse(
                    args["nullable_strategy"]
                )
            for case_key in ("struct_name_case", "field_name_case"):
                if args.get(case_key) is not None:
                    args[case_key] = NamingCase.parse(args[case_key])
        except CaseConversionError as e:
            raise ConfigError(f"Language '{name}': {e}") from e

        for key in ("tags", "default_imports"):
            if key in args:
                args[key] = _string_tuple(args[key], f"languages.{name}.{key}")

        for key in ("type_overrides", "generic_types", "nullable_formats"):
            if key in args:
                args[key] = _string_dict(args[key], f"languages.{name}.{key}")

        for key in ("type_imports", "nullable_imports"):
            if key in args:
                section = _mapping(args[key] or {}, f"languages.{name}.{key}")
                args[key] = {
                    str(k): _string_tuple(v, f"languages.{name}.{key}.{k}")
                    for k, v in section.items()
                }

        if "nullable_types" in args:
            section = _mapping(args["nullable_types"] or {}, f"languages.{name}.nullable_types")
            nullable_types = {}
            for strategy_key, table in section.items():
                strategy = NullableStrategy.parse(strategy_key)
                nullable_types[strategy.value] = _string_dict(
                    table, f"languages.{name}.nullable_types.{strategy_key}"
                )
            args["nullable_types"] = nullable_types

        if "nullable_formats" in args:
            args["nullable_formats"] = {
                NullableStrategy.parse(k).value: v
                for k, v in args["nullable_formats"].items()
            }
            for strategy_value, fmt in args["nullable_formats"].items():
                if "{type}" not in fmt:
                    raise ConfigError(
                        f"languages.{name}.nullable_formats.{strategy_value} "
                        f"must contain '{{type}}': {fmt!r}"
                    )

        if args.get("tag_wrapper") is not None and "{tags}" not in args["tag_wrapper"]:
            raise ConfigError(
                f"languages.{name}.tag_wrapper must contain '{{tags}}'"
            )

        if "accept_generic_labels" in args:
            args["accept_generic_labels"] = bool(args["accept_generic_labels"])

        for key in (
            "field_prefix",
            "output_extension",
            "package_name",
            "template_file",
            "template_path",
            "fallback_type",
            "tag_separator",
        ):
            if args.get(key) is not None and not isinstance(args[key], str):
                raise ConfigError(f"languages.{name}.{key} must be a string")

        return cls(name=name, custom=custom, **args)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to a plain configuration mapping."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("name", "custom"):
                continue
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, dict):
                value = {
                    k: list(v) if isinstance(v, tuple) else copy.deepcopy(v)
                    for k, v in value.items()
                }
            if value in (None, [], {}):
                continue
            data[f.name] = value
        data.update(copy.deepcopy(self.custom))
        return data


@dataclass(frozen=True)
class NamingConventions:
    """Global naming defaults used when a language sets none."""

    table_to_struct_case: NamingCase = NamingCase.PASCAL_CASE
    column_to_field_case: NamingCase = NamingCase.CAMEL_CASE


@dataclass(frozen=True)
class TablePatterns:
    """Include/exclude glob patterns for table selection."""

    include: Tuple[str, ...] = ("*",)
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for one configured database."""

    db_type: str
    dsn: str = ""
    db_name: str = "main"

    @property
    def dialect(self) -> Dialect:
        try:
            return Dialect.parse(self.db_type)
        except SchemaError as e:
            raise ConfigError(str(e)) from e


@dataclass(frozen=True)
class GenerationConfig:
    """Settings of one generation run."""

    target_languages: Tuple[str, ...] = ()
    output_dir: Path = Path("./generated")
    template_dir: Optional[Path] = None
    table_patterns: TablePatterns = field(default_factory=TablePatterns)
    output_structure: str = "by_language"
    max_workers: int = 1


@dataclass(frozen=True)
class CodegenConfig:
    """Complete, merged configuration for a generation run."""

    generation: GenerationConfig = field(default_factory=GenerationConfig)
    languages: Dict[str, LanguageConfig] = field(default_factory=dict)
    type_mappings: TypeMappingTable = field(
        default_factory=lambda: copy.deepcopy(BUILTIN_TYPE_MAPPINGS)
    )
    naming: NamingConventions = field(default_factory=NamingConventions)
    databases: Dict[str, DatabaseConfig] = field(default_factory=dict)
    active_database: Optional[str] = None
    registry: LanguageRegistry = field(default_factory=get_registry, compare=False, repr=False)

    def language(self, name: str) -> LanguageConfig:
        """
        Get the configuration of a target language.

        Languages missing from the ``languages`` section fall back to the
        built-in profile, or to a bare config for unknown languages.
        """
        canonical = self.registry.canonical_name(name)
        if canonical in self.languages:
            return self.languages[canonical]
        return LanguageConfig.from_dict(canonical, self.registry.get_profile(canonical))

    def active_database_config(self) -> DatabaseConfig:
        """
        Get the active database settings.

        Raises:
            ConfigError: If no database is active or it is not configured
        """
        if not self.active_database:
            raise ConfigError("No active_database configured")
        if self.active_database not in self.databases:
            raise ConfigError(
                f"Active database '{self.active_database}' not found in config.databases"
            )
        return self.databases[self.active_database]

    def with_overrides(
        self,
        target_languages: Optional[List[str]] = None,
        output_dir: Optional[Union[str, Path]] = None,
        tables: Optional[List[str]] = None,
        max_workers: Optional[int] = None,
        active_database: Optional[str] = None,
        db_type: Optional[str] = None,
        dsn: Optional[str] = None,
    ) -> "CodegenConfig":
        """Return a copy with command-line overrides applied."""
        generation = self.generation
        if target_languages:
            generation = replace(
                generation,
                target_languages=tuple(
                    self.registry.canonical_name(lang) for lang in target_languages
                ),
            )
        if output_dir is not None:
            generation = replace(generation, output_dir=Path(output_dir))
        if tables:
            logger.info(f"Filtering to specific tables: {', '.join(tables)}")
            generation = replace(
                generation, table_patterns=TablePatterns(include=tuple(tables), exclude=())
            )
        if max_workers is not None:
            if max_workers < 1:
                raise ConfigError("max_workers must be at least 1")
            generation = replace(generation, max_workers=max_workers)

        databases = dict(self.databases)
        active = active_database or self.active_database
        if db_type or dsn:
            if active is None:
                active = "main"
            current = databases.get(active) or DatabaseConfig(db_type=db_type or "")
            databases[active] = replace(
                current,
                db_type=db_type or current.db_type,
                dsn=dsn or current.dsn,
            )

        return replace(
            self, generation=generation, databases=databases, active_database=active
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain mapping suitable for JSON/YAML output."""
        generation = self.generation
        return {
            "active_database": self.active_database,
            "databases": {
                name: {"db_type": db.db_type, "dsn": db.dsn, "db_name": db.db_name}
                for name, db in self.databases.items()
            },
            "generation": {
                "target_languages": list(generation.target_languages),
                "output_dir": str(generation.output_dir),
                "template_dir": str(generation.template_dir)
                if generation.template_dir
                else None,
                "table_patterns": {
                    "include": list(generation.table_patterns.include),
                    "exclude": list(generation.table_patterns.exclude),
                },
                "output_structure": generation.output_structure,
                "max_workers": generation.max_workers,
            },
            "languages": {
                name: lang.to_dict() for name, lang in self.languages.items()
            },
            "type_mappings": copy.deepcopy(self.type_mappings),
            "naming_conventions": {
                "table_to_struct_case": self.naming.table_to_struct_case.value,
                "column_to_field_case": self.naming.column_to_field_case.value,
            },
        }


class ConfigManager:
    """Loads configuration files and merges them onto built-in defaults."""

    def __init__(self, registry: Optional[LanguageRegistry] = None):
        """Initialize configuration manager."""
        self.registry = registry or get_registry()

    def load(
        self,
        config_file: Optional[Union[str, Path]] = None,
        custom_config: Optional[Dict[str, Any]] = None,
    ) -> CodegenConfig:
        """
        Get the complete configuration.

        Args:
            config_file: Path to a JSON or YAML configuration file
            custom_config: Mapping applied on top of the file contents

        Returns:
            Merged, immutable configuration
        """
        data: Dict[str, Any] = {}

        if config_file:
            data = self._load_config_file(config_file)

        if custom_config:
            data = merge_dicts(data, custom_config)

        return self.build(data)

    def build(self, data: Mapping[str, Any]) -> CodegenConfig:
        """Build a CodegenConfig from an already-deserialized mapping."""
        data = _mapping(data, "configuration")

        languages = self._build_languages(_mapping(data.get("languages") or {}, "languages"))
        generation = self._build_generation(
            _mapping(data.get("generation") or {}, "generation")
        )
        if not generation.target_languages:
            generation = replace(generation, target_languages=tuple(languages))

        return CodegenConfig(
            generation=generation,
            languages=languages,
            type_mappings=self._build_type_mappings(data.get("type_mappings") or {}),
            naming=self._build_naming(
                _mapping(data.get("naming_conventions") or {}, "naming_conventions")
            ),
            databases=self._build_databases(
                _mapping(data.get("databases") or {}, "databases")
            ),
            active_database=data.get("active_database"),
            registry=self.registry,
        )

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from a JSON or YAML file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in (".json", ".yaml", ".yml"):
            raise ConfigError(f"Configuration file must be JSON or YAML: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    config = json.load(f)
                else:
                    config = yaml.safe_load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")

        logger.info(f"Loaded configuration from {path}")
        return config

    def _build_languages(self, section: Mapping[str, Any]) -> Dict[str, LanguageConfig]:
        languages = {}
        for raw_name, entry in section.items():
            name = self.registry.canonical_name(str(raw_name))
            entry = _mapping(entry or {}, f"languages.{raw_name}")
            merged = merge_dicts(self.registry.get_profile(name), entry)
            languages[name] = LanguageConfig.from_dict(name, merged)
        return languages

    def _build_generation(self, section: Mapping[str, Any]) -> GenerationConfig:
        target_languages = section.get("target_languages") or []
        if isinstance(target_languages, str):
            target_languages = [target_languages]
        target_languages = tuple(
            self.registry.canonical_name(str(lang)) for lang in target_languages
        )

        patterns = section.get("table_patterns", section.get("table_name_patterns"))
        if patterns is None:
            table_patterns = TablePatterns()
        else:
            patterns = _mapping(patterns, "generation.table_patterns")
            table_patterns = TablePatterns(
                include=_string_tuple(
                    patterns.get("include", ["*"]), "generation.table_patterns.include"
                ),
                exclude=_string_tuple(
                    patterns.get("exclude") or [], "generation.table_patterns.exclude"
                ),
            )

        output_structure = section.get("output_structure", "by_language")
        if output_structure not in OUTPUT_STRUCTURES:
            raise ConfigError(
                f"Invalid output_structure: {output_structure}. "
                f"Valid: {', '.join(OUTPUT_STRUCTURES)}"
            )

        max_workers = section.get("max_workers", 1)
        if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer: {max_workers!r}")

        template_dir = section.get("template_dir")

        return GenerationConfig(
            target_languages=target_languages,
            output_dir=Path(section.get("output_dir") or "./generated"),
            template_dir=Path(template_dir) if template_dir else None,
            table_patterns=table_patterns,
            output_structure=output_structure,
            max_workers=max_workers,
        )

    def _build_type_mappings(self, section: Any) -> TypeMappingTable:
        """Merge user type mappings onto the built-in table, key by key."""
        section = _mapping(section, "type_mappings")
        merged = copy.deepcopy(BUILTIN_TYPE_MAPPINGS)

        for raw_dialect, types in section.items():
            try:
                dialect = Dialect.parse(str(raw_dialect)).value
            except SchemaError as e:
                raise ConfigError(f"type_mappings: {e}") from e

            types = _mapping(types or {}, f"type_mappings.{raw_dialect}")
            dialect_table = merged.setdefault(dialect, {})
            for raw_type, entry in types.items():
                entry = _string_dict(entry, f"type_mappings.{raw_dialect}.{raw_type}")
                dialect_table.setdefault(str(raw_type), {}).update(entry)

        return merged

    def _build_naming(self, section: Mapping[str, Any]) -> NamingConventions:
        defaults = NamingConventions()
        try:
            return NamingConventions(
                table_to_struct_case=NamingCase.parse(
                    section.get("table_to_struct_case", defaults.table_to_struct_case)
                ),
                column_to_field_case=NamingCase.parse(
                    section.get("column_to_field_case", defaults.column_to_field_case)
                ),
            )
        except CaseConversionError as e:
            raise ConfigError(f"naming_conventions: {e}") from e

    def _build_databases(self, section: Mapping[str, Any]) -> Dict[str, DatabaseConfig]:
        databases = {}
        for name, entry in section.items():
            entry = _mapping(entry or {}, f"databases.{name}")
            if not entry.get("db_type"):
                raise ConfigError(f"databases.{name}.db_type is required")
            databases[str(name)] = DatabaseConfig(
                db_type=str(entry["db_type"]),
                dsn=str(entry.get("dsn") or ""),
                db_name=str(entry.get("db_name") or "main"),
            )
        return databases

    def save_config(self, config: CodegenConfig, output_path: Union[str, Path]):
        """Save configuration to a JSON or YAML file."""
        path = Path(output_path)
        config_dict = config.to_dict()

        try:
            with open(path, "w", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    json.dump(config_dict, f, indent=2, ensure_ascii=False)
                else:
                    yaml.safe_dump(config_dict, f, sort_keys=False, allow_unicode=True)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    custom_config: Optional[Dict[str, Any]] = None,
    registry: Optional[LanguageRegistry] = None,
) -> CodegenConfig:
    """
    Convenience function to load configuration.

    Args:
        config_file: Path to JSON or YAML configuration file
        custom_config: Custom configuration overrides
        registry: Language registry (defaults to the built-in one)

    Returns:
        Merged configuration
    """
    return ConfigManager(registry).load(config_file, custom_config)


def write_default_config(config_path: Union[str, Path]) -> Path:
    """
    Write a starter configuration file.

    Raises:
        ConfigError: If the file already exists or cannot be written
    """
    path = Path(config_path)
    if path.exists():
        raise ConfigError(f"Configuration file already exists at: {path}")

    try:
        path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to write config file to {path}: {e}") from e

    logger.info(f"Created default configuration file: {path}")
    return path


def merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` onto a copy of ``base``."""
    result = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _string_tuple(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{where} must be a list of strings")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{where} must only contain strings, got {item!r}")
    return tuple(value)


def _string_dict(value: Any, where: str) -> Dict[str, str]:
    value = _mapping(value or {}, where)
    result = {}
    for key, item in value.items():
        if not isinstance(item, str):
            raise ConfigError(f"{where}.{key} must be a string, got {item!r}")
        result[str(key)] = item
    return result


DEFAULT_CONFIG_YAML = """\
# Database Code Generator Configuration

# Active database to use for generation
active_database: "main"

# Database configurations
databases:
  main:
    db_type: "sqlite"  # mysql, postgres, sqlite
    db_name: "main"
    dsn: "sqlite:./data/app.db"

# Code generation settings
generation:
  # Languages to generate code for
  target_languages:
    - "rust"
    - "typescript"

  # Output directory for generated files
  output_dir: "./generated"

  # Directory searched for custom templates before the built-in ones
  # template_dir: "./templates"

  # by_language, by_table or flat
  output_structure: "by_language"

  # Table filtering patterns (exclude always wins)
  table_patterns:
    include:
      - "*"
    exclude:
      - "_*"
      - "migrations"
      - "schema_*"

# Language-specific configurations
# All fields are optional; built-in languages have sensible defaults.
languages:
  rust:
    nullable_strategy: "option"
    # tags:
    #   - '#[serde(rename = "{{ OriginalColumnName }}")]'

  typescript:
    nullable_strategy: "union"

  go:
    nullable_strategy: "pointer"
    package_name: "models"
    tags:
      - 'json:"{{ to_camel_case OriginalColumnName }}"'
      - 'db:"{{ OriginalColumnName }}"'

  python:
    nullable_strategy: "optional_type"

  java:
    nullable_strategy: "nullable_type"
    # tags:
    #   - '@Column(name = "{{ OriginalColumnName }}")'

  csharp:
    nullable_strategy: "nullable_type"
    # tags:
    #   - '[Column("{{ OriginalColumnName }}")]'

# Type mappings are built in; entries here override them key by key.
# type_mappings:
#   postgres:
#     citext:
#       generic: "string"
#       go: "string"
#       typescript: "string"

# Naming conventions used when a language sets none
naming_conventions:
  table_to_struct_case: "PascalCase"
  column_to_field_case: "camelCase"
"""
