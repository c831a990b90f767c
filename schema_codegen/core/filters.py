"""
Table selection by include/exclude glob patterns.

A table is kept when it matches at least one include pattern and
no exclude pattern. Exclusion always wins.
"""

from fnmatch import fnmatchcase
from typing import Iterable, List, Sequence

from ..logging_config import get_logger
from .errors import CodegenError
from .schema import Table

logger = get_logger(__name__)

DEFAULT_INCLUDE = ("*",)
DEFAULT_EXCLUDE = ()


class InvalidPatternError(CodegenError):
    """Raised for malformed glob patterns in the filter configuration."""

    pass


def validate_pattern(pattern) -> str:
    """
    Check that a pattern is a usable shell glob.

    Raises:
        InvalidPatternError: For non-string, empty or unterminated class patterns
    """
    if not isinstance(pattern, str):
        raise InvalidPatternError(f"Table pattern must be a string: {pattern!r}")

    if not pattern:
        raise InvalidPatternError("Table pattern must not be empty")

    # fnmatch treats a lone '[' as a literal; reject it so typos surface
    i = 0
    while i < len(pattern):
        if pattern[i] == "[":
            j = i + 1
            if j < len(pattern) and pattern[j] in "!^":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close == -1:
                raise InvalidPatternError(
                    f"Unterminated character class in table pattern: {pattern}"
                )
            i = close
        i += 1

    return pattern


def matches_any(name: str, patterns: Iterable[str]) -> bool:
    """Check whether a name matches any of the glob patterns."""
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def retain(
    table_name: str,
    include_patterns: Sequence[str] = DEFAULT_INCLUDE,
    exclude_patterns: Sequence[str] = DEFAULT_EXCLUDE,
) -> bool:
    """
    Decide whether a table takes part in generation.

    Args:
        table_name: Table name as introspected
        include_patterns: Globs of tables to keep (empty keeps nothing)
        exclude_patterns: Globs of tables to drop

    Returns:
        True if the table is retained
    """
    if matches_any(table_name, exclude_patterns):
        return False
    return matches_any(table_name, include_patterns)


class TableFilter:
    """Validated include/exclude pattern set."""

    def __init__(
        self,
        include: Sequence[str] = DEFAULT_INCLUDE,
        exclude: Sequence[str] = DEFAULT_EXCLUDE,
    ):
        """
        Initialize the filter.

        Raises:
            InvalidPatternError: If any pattern is malformed
        """
        if isinstance(include, str) or isinstance(exclude, str):
            raise InvalidPatternError(
                "Table patterns must be lists of strings, not a single string"
            )
        self.include = tuple(validate_pattern(p) for p in include)
        self.exclude = tuple(validate_pattern(p) for p in exclude)

    def retain(self, table_name: str) -> bool:
        return retain(table_name, self.include, self.exclude)

    def select(self, tables: Iterable[Table]) -> List[Table]:
        """Return retained tables in their original order."""
        selected = []
        for table in tables:
            if self.retain(table.name):
                selected.append(table)
            else:
                logger.info(f"Skipping table '{table.name}' due to filter patterns")
        return selected

    def __repr__(self) -> str:
        return f"TableFilter(include={list(self.include)}, exclude={list(self.exclude)})"
