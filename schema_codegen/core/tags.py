"""
Placeholder expansion inside per-column tag strings.

Tags such as ``json:"{{ OriginalColumnName }}"`` are expanded in a single
substitution pass before the outer Jinja2 render. A placeholder is either
``{{ Name }}`` or ``{{ helper Name }}`` where helper is a case conversion.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .naming import (
    CaseConversionError,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_screaming_snake_case,
    to_snake_case,
)

PLACEHOLDER_RE = re.compile(
    r"\{\{\s*(?:(?P<helper>[A-Za-z_][A-Za-z0-9_]*)\s+)?(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*\}\}"
)

HELPERS: Dict[str, Callable[[str], str]] = {
    "to_snake_case": to_snake_case,
    "to_camel_case": to_camel_case,
    "to_pascal_case": to_pascal_case,
    "to_kebab_case": to_kebab_case,
    "to_screaming_snake_case": to_screaming_snake_case,
}

PLACEHOLDERS = (
    "FieldName",
    "OriginalColumnName",
    "LangType",
    "IsNullable",
    "ColumnComment",
    "DefaultValue",
    "IsPrimaryKey",
    "StructName",
    "TableName",
)

# Older configuration files use these names
LEGACY_PLACEHOLDERS = {
    "field_name": "OriginalColumnName",
    "column_name": "OriginalColumnName",
    "struct_name": "TableName",
    "actual_field_name": "FieldName",
}


@dataclass(frozen=True)
class TagExpansionWarning:
    """A placeholder left verbatim in a tag: unknown, or its helper failed."""

    tag: str
    placeholder: str
    message: str
    column: Optional[str] = None

    def __str__(self) -> str:
        where = f" (column '{self.column}')" if self.column else ""
        return f"{self.message}{where}: {self.tag}"


@dataclass
class TagExpansion:
    """Expanded tags of one column plus any warnings raised on the way."""

    tags: List[str] = field(default_factory=list)
    warnings: List[TagExpansionWarning] = field(default_factory=list)


def format_value(value: Any) -> str:
    """Render a context value the way generated code expects it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def expand(tag_templates: Sequence[str], column_context: Mapping[str, Any]) -> TagExpansion:
    """
    Expand placeholders in each tag template.

    Args:
        tag_templates: Tag strings from the language configuration
        column_context: Already-resolved values for the column

    Returns:
        TagExpansion with non-empty, stripped tags in configured order
    """
    result = TagExpansion()
    column = column_context.get("OriginalColumnName")

    for template in tag_templates:
        warnings: List[TagExpansionWarning] = []

        def substitute(match: "re.Match[str]") -> str:
            helper_name = match.group("helper")
            name = match.group("name")
            key = LEGACY_PLACEHOLDERS.get(name, name)

            if key not in PLACEHOLDERS or key not in column_context:
                warnings.append(
                    TagExpansionWarning(
                        tag=template,
                        placeholder=match.group(0),
                        message=f"Unknown tag placeholder '{name}'",
                        column=column,
                    )
                )
                return match.group(0)

            value = format_value(column_context[key])

            if helper_name is None:
                return value

            helper = HELPERS.get(helper_name)
            if helper is None:
                warnings.append(
                    TagExpansionWarning(
                        tag=template,
                        placeholder=match.group(0),
                        message=f"Unknown tag helper '{helper_name}'",
                        column=column,
                    )
                )
                return match.group(0)

            if not value:
                return value
            try:
                return helper(value)
            except CaseConversionError as e:
                warnings.append(
                    TagExpansionWarning(
                        tag=template,
                        placeholder=match.group(0),
                        message=f"Tag helper '{helper_name}' failed: {e}",
                        column=column,
                    )
                )
                return match.group(0)

        expanded = PLACEHOLDER_RE.sub(substitute, template).strip()
        if expanded:
            result.tags.append(expanded)
        result.warnings.extend(warnings)

    return result


def join_tags(tags: Sequence[str], separator: str = " ", wrapper: Optional[str] = None) -> str:
    """Join expanded tags into the single string a template emits."""
    if not tags:
        return ""
    joined = separator.join(tags)
    if wrapper:
        return wrapper.replace("{tags}", joined)
    return joined
