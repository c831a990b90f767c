"""
Language profile registry.

Holds the built-in defaults for each known target language (file
extension, template, nullable strategy, type fallbacks, imports) and
the aliases users may type for them. Profiles are plain dictionaries
with the same keys as a ``languages.<name>`` configuration entry, so a
user entry overrides a profile key by key.
"""

import copy
from typing import Any, Dict, List, Optional

from .logging_config import get_logger

logger = get_logger(__name__)


class RegistryError(Exception):
    """Unknown language, malformed profile or clashing alias."""

    pass


class LanguageRegistry:
    """Built-in language profiles keyed by lowercase name, plus aliases."""

    def __init__(self):
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        profile: Dict[str, Any],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Add a language profile.

        An existing profile is kept unless ``replace`` is set; with
        ``replace`` set, aliases are rebound without conflict checks.

        Raises:
            RegistryError: If ``profile`` is not a dict, or an alias names
                another primary language or is bound elsewhere
        """
        if not isinstance(profile, dict):
            raise RegistryError(f"Profile for {language} must be a dictionary")

        key = language.lower()
        if key in self._profiles and not replace:
            return
        self._profiles[key] = profile

        for name in {a.lower() for a in aliases or []} - {key}:
            bound = self._aliases.get(name)
            if not replace and name in self._profiles:
                raise RegistryError(f"Alias '{name}' is already a primary language name")
            if not replace and bound not in (None, key):
                raise RegistryError(f"Alias '{name}' already points to '{bound}'")
            self._aliases[name] = key

        logger.debug(f"Registered language profile: {key}")

    def unregister(self, language: str):
        """Drop a profile together with every alias bound to it."""
        key = language.lower()
        self._profiles.pop(key, None)
        self._aliases = {a: t for a, t in self._aliases.items() if t != key}

    def canonical_name(self, language: str) -> str:
        """Resolve an alias to its primary language name.

        Unknown names are returned lowercased, since any language can be
        configured purely through data.
        """
        key = language.lower()
        return self._aliases.get(key, key)

    def get_profile(self, language: str) -> Dict[str, Any]:
        """Deep copy of the profile, or ``{}`` when none is registered."""
        return copy.deepcopy(self._profiles.get(self.canonical_name(language), {}))

    def is_supported(self, language: str) -> bool:
        return self.canonical_name(language) in self._profiles

    def list_languages(self) -> List[str]:
        return sorted(self._profiles)

    def get_aliases_for_language(self, language: str) -> List[str]:
        key = self.canonical_name(language)
        return sorted(a for a, t in self._aliases.items() if t == key)

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """
        Summarize a profile for display.

        Raises:
            RegistryError: If the language has no built-in profile
        """
        key = self.canonical_name(language)
        profile = self._profiles.get(key)
        if profile is None:
            raise RegistryError(
                f"No built-in profile for language: {language}. "
                f"Available: {', '.join(self.list_languages())}"
            )

        return {
            "name": key,
            "file_extension": profile.get("output_extension", ""),
            "template_file": profile.get("template_file"),
            "nullable_strategy": profile.get("nullable_strategy", "native"),
            "aliases": self.get_aliases_for_language(key),
        }


def _generic_types(string, integer, float_, boolean, datetime, bytes_, **extra):
    types = {
        "string": string,
        "integer": integer,
        "float": float_,
        "boolean": boolean,
        "datetime": datetime,
        "bytes": bytes_,
    }
    types.update(extra)
    return types


# Primitives that cannot hold null, keyed to their wrapper classes
JAVA_BOXED_TYPES = {
    "int": "Integer",
    "long": "Long",
    "short": "Short",
    "byte": "Byte",
    "char": "Character",
    "boolean": "Boolean",
    "float": "Float",
    "double": "Double",
}

BUILTIN_PROFILES: Dict[str, Dict[str, Any]] = {
    "rust": {
        "output_extension": "rs",
        "template_file": "rust_struct.rs.j2",
        "nullable_strategy": "option",
        "field_name_case": "snake_case",
        "default_imports": ["serde::{Deserialize, Serialize}"],
        "generic_types": _generic_types(
            "String",
            "i64",
            "f64",
            "bool",
            "chrono::NaiveDateTime",
            "Vec<u8>",
            decimal="f64",
            date="chrono::NaiveDate",
            json="serde_json::Value",
        ),
        "tag_separator": "\n    ",
    },
    "typescript": {
        "output_extension": "ts",
        "template_file": "typescript_interface.ts.j2",
        "nullable_strategy": "union",
        "field_name_case": "camelCase",
        "generic_types": _generic_types(
            "string",
            "number",
            "number",
            "boolean",
            "Date",
            "Uint8Array",
            decimal="number",
            date="Date",
            json="unknown",
        ),
    },
    "go": {
        "output_extension": "go",
        "template_file": "go_struct.go.j2",
        "nullable_strategy": "pointer",
        "field_name_case": "PascalCase",
        "package_name": "models",
        "tags": [
            'json:"{{ OriginalColumnName }}"',
            'db:"{{ OriginalColumnName }}"',
        ],
        "tag_separator": " ",
        "tag_wrapper": "`{tags}`",
        "generic_types": _generic_types(
            "string",
            "int64",
            "float64",
            "bool",
            "time.Time",
            "[]byte",
            decimal="float64",
            date="time.Time",
            json="json.RawMessage",
        ),
        "type_imports": {
            "time.Time": ["time"],
            "json.RawMessage": ["encoding/json"],
        },
        "nullable_types": {
            "nullable_type": {
                "string": "sql.NullString",
                "int16": "sql.NullInt16",
                "int32": "sql.NullInt32",
                "int64": "sql.NullInt64",
                "float64": "sql.NullFloat64",
                "bool": "sql.NullBool",
                "time.Time": "sql.NullTime",
            },
        },
        "nullable_imports": {"nullable_type": ["database/sql"]},
    },
    "python": {
        "output_extension": "py",
        "template_file": "python_dataclass.py.j2",
        "nullable_strategy": "optional_type",
        "field_name_case": "snake_case",
        "generic_types": _generic_types(
            "str",
            "int",
            "float",
            "bool",
            "datetime",
            "bytes",
            decimal="Decimal",
            date="date",
            json="dict",
        ),
        "type_imports": {
            "datetime": ["datetime.datetime"],
            "date": ["datetime.date"],
            "Decimal": ["decimal.Decimal"],
            "UUID": ["uuid.UUID"],
        },
        "nullable_imports": {"optional_type": ["typing.Optional"]},
        "tag_separator": "\n    ",
    },
    "java": {
        "output_extension": "java",
        "template_file": "java_class.java.j2",
        "nullable_strategy": "nullable_type",
        "field_name_case": "camelCase",
        "package_name": "models",
        "generic_types": _generic_types(
            "String",
            "int",
            "double",
            "boolean",
            "java.time.LocalDateTime",
            "byte[]",
            decimal="java.math.BigDecimal",
            date="java.time.LocalDate",
            json="String",
        ),
        "type_imports": {
            "LocalDateTime": ["java.time.LocalDateTime"],
            "LocalDate": ["java.time.LocalDate"],
            "OffsetDateTime": ["java.time.OffsetDateTime"],
            "BigDecimal": ["java.math.BigDecimal"],
            "UUID": ["java.util.UUID"],
        },
        "nullable_types": {
            "nullable_type": JAVA_BOXED_TYPES,
            "optional_type": dict(JAVA_BOXED_TYPES),
        },
        "nullable_formats": {"nullable_type": "{type}", "optional_type": "{type}"},
        "tag_separator": "\n    ",
    },
    "csharp": {
        "output_extension": "cs",
        "template_file": "csharp_class.cs.j2",
        "nullable_strategy": "nullable_type",
        "field_name_case": "PascalCase",
        "package_name": "Models",
        "generic_types": _generic_types(
            "string",
            "long",
            "double",
            "bool",
            "DateTime",
            "byte[]",
            decimal="decimal",
            date="DateTime",
            json="string",
        ),
        "tag_separator": "\n        ",
    },
    # Known languages without built-in templates or type fallbacks.
    # Users supply type mappings and a template_path to target them.
    "php": {"output_extension": "php", "nullable_strategy": "nullable_type",
            "nullable_formats": {"nullable_type": "?{type}"}},
    "ruby": {"output_extension": "rb", "nullable_strategy": "native"},
    "swift": {"output_extension": "swift", "nullable_strategy": "nullable_type"},
    "kotlin": {"output_extension": "kt", "nullable_strategy": "nullable_type"},
    "dart": {"output_extension": "dart", "nullable_strategy": "nullable_type"},
    "zig": {"output_extension": "zig", "nullable_strategy": "optional_type",
            "nullable_formats": {"optional_type": "?{type}"}},
    "nim": {"output_extension": "nim", "nullable_strategy": "optional_type",
            "nullable_formats": {"optional_type": "Option[{type}]"}},
    "haskell": {"output_extension": "hs", "nullable_strategy": "optional_type",
                "nullable_formats": {"optional_type": "Maybe {type}"}},
    "ocaml": {"output_extension": "ml", "nullable_strategy": "optional_type",
              "nullable_formats": {"optional_type": "{type} option"}},
}

BUILTIN_ALIASES: Dict[str, List[str]] = {
    "rust": ["rs"],
    "typescript": ["ts"],
    "go": ["golang"],
    "python": ["py"],
    "csharp": ["cs", "c#"],
    "kotlin": ["kt"],
    "haskell": ["hs"],
}


_builtin_registry: Optional[LanguageRegistry] = None


def get_registry() -> LanguageRegistry:
    """Shared registry holding the built-in profiles, created on first use."""
    global _builtin_registry
    if _builtin_registry is None:
        registry = LanguageRegistry()
        for language, profile in BUILTIN_PROFILES.items():
            registry.register(language, profile, aliases=BUILTIN_ALIASES.get(language))
        _builtin_registry = registry
    return _builtin_registry


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def get_language_info(language: str) -> Dict[str, Any]:
    """Display summary of a built-in language; see LanguageRegistry.get_language_info."""
    return get_registry().get_language_info(language)


def list_all_language_info() -> Dict[str, Dict[str, Any]]:
    registry = get_registry()
    return {name: registry.get_language_info(name) for name in registry.list_languages()}
