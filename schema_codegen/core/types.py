"""
Type mapping resolution.

Turns a (dialect, raw column type, language) triple into the type string
written into generated code, then applies the language's nullable strategy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from ..logging_config import get_logger
from .config import LanguageConfig, NullableStrategy
from .errors import CodegenError
from .mappings import GENERIC_KEY, TypeMappingTable
from .schema import Dialect

logger = get_logger(__name__)


class UnmappedTypeError(CodegenError):
    """No type mapping resolves a raw type for a language."""

    def __init__(self, dialect: str, raw_type: str, language: str):
        self.dialect = dialect
        self.raw_type = raw_type
        self.language = language
        super().__init__(
            f"No type mapping for {dialect} type '{raw_type}' in language '{language}'"
        )


class ResolutionSource(Enum):
    """Which layer of the precedence chain produced a type."""

    EXACT = "exact"
    OVERRIDE = "override"
    LANGUAGE_DEFAULT = "language_default"
    GENERIC = "generic"
    FALLBACK = "fallback"


DEGRADED_SOURCES = (ResolutionSource.GENERIC, ResolutionSource.FALLBACK)

DEFAULT_NULLABLE_FORMATS: Dict[NullableStrategy, str] = {
    NullableStrategy.OPTION: "Option<{type}>",
    NullableStrategy.UNION: "{type} | null",
    NullableStrategy.POINTER: "*{type}",
    NullableStrategy.NULLABLE_TYPE: "{type}?",
    NullableStrategy.OPTIONAL_TYPE: "Optional[{type}]",
    NullableStrategy.NATIVE: "{type}",
}


@dataclass(frozen=True)
class ResolvedType:
    """Result of resolving one column type for one language."""

    base: str
    lang_type: str
    source: ResolutionSource
    imports: Tuple[str, ...] = ()
    wrapped: bool = False

    @property
    def degraded(self) -> bool:
        """True if the type came from a fallback layer worth warning about."""
        return self.source in DEGRADED_SOURCES


class TypeMappingResolver:
    """
    Resolves raw column types against a merged type mapping table.

    Precedence, first match wins:
      1. ``type_mappings[dialect][raw_type][language]``
      2. ``language.type_overrides[raw_type]``
      3. the dialect's generic label translated by ``language.generic_types``
      4. the generic label itself, if the language accepts generic labels
      5. ``language.fallback_type``

    Raw types are looked up exactly as given.
    """

    def __init__(self, type_mappings: TypeMappingTable):
        self.type_mappings = type_mappings

    def resolve_base(
        self, dialect: "Dialect | str", raw_type: str, language: LanguageConfig
    ) -> Tuple[str, ResolutionSource]:
        """
        Resolve the unwrapped language type.

        Raises:
            UnmappedTypeError: If no layer provides a type
        """
        dialect_key = Dialect.parse(dialect).value
        entry: Mapping[str, str] = self.type_mappings.get(dialect_key, {}).get(
            raw_type, {}
        )

        if language.name in entry:
            return entry[language.name], ResolutionSource.EXACT

        if raw_type in language.type_overrides:
            return language.type_overrides[raw_type], ResolutionSource.OVERRIDE

        label = entry.get(GENERIC_KEY)
        if label is not None:
            if label in language.generic_types:
                return language.generic_types[label], ResolutionSource.LANGUAGE_DEFAULT
            if language.accept_generic_labels:
                return label, ResolutionSource.GENERIC

        if language.fallback_type:
            return language.fallback_type, ResolutionSource.FALLBACK

        raise UnmappedTypeError(dialect_key, raw_type, language.name)

    def resolve(
        self,
        dialect: "Dialect | str",
        raw_type: str,
        language: LanguageConfig,
        nullable: bool = False,
    ) -> ResolvedType:
        """
        Resolve a column type and apply nullability.

        Args:
            dialect: Source database dialect
            raw_type: Column type exactly as reported by the database
            language: Target language configuration
            nullable: Whether the column may be NULL

        Returns:
            ResolvedType with the final language type and required imports

        Raises:
            UnmappedTypeError: If the raw type cannot be resolved
        """
        base, source = self.resolve_base(dialect, raw_type, language)

        if source in DEGRADED_SOURCES:
            logger.debug(
                f"Degraded type resolution for {dialect} '{raw_type}' in "
                f"{language.name}: {base} ({source.value})"
            )

        imports: List[str] = []

        if not nullable:
            imports.extend(language.type_imports.get(base, ()))
            return ResolvedType(base=base, lang_type=base, source=source, imports=tuple(imports))

        lang_type, replaced = apply_nullable(base, language)

        if not replaced:
            imports.extend(language.type_imports.get(base, ()))
        if lang_type != base:
            imports.extend(language.type_imports.get(lang_type, ()))
        imports.extend(language.nullable_imports.get(language.nullable_strategy.value, ()))

        return ResolvedType(
            base=base,
            lang_type=lang_type,
            source=source,
            imports=tuple(dict.fromkeys(imports)),
            wrapped=lang_type != base,
        )


def apply_nullable(base: str, language: LanguageConfig) -> Tuple[str, bool]:
    """
    Wrap a base type according to the language's nullable strategy.

    Returns:
        Tuple of the nullable type and whether a dedicated nullable type
        (e.g. ``sql.NullString``) replaced the base type
    """
    strategy = language.nullable_strategy
    special: Optional[str] = language.nullable_types.get(strategy.value, {}).get(base)
    if special is not None:
        return special, True

    fmt = language.nullable_formats.get(strategy.value, DEFAULT_NULLABLE_FORMATS[strategy])
    return fmt.replace("{type}", base), False
