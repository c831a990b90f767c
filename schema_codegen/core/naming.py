"""
Identifier case conversion for generated code.

Splits raw table/column identifiers into words and re-joins them
in the naming case a target language asks for.
"""

import re
from typing import List
from enum import Enum

from .errors import CodegenError


class CaseConversionError(CodegenError):
    """Raised for empty or unconvertible identifiers and unknown cases."""

    pass


class NamingCase(Enum):
    """Different naming case styles."""

    PASCAL_CASE = "PascalCase"  # UserName
    CAMEL_CASE = "camelCase"  # userName
    SNAKE_CASE = "snake_case"  # user_name
    KEBAB_CASE = "kebab-case"  # user-name
    SCREAMING_SNAKE = "SCREAMING_SNAKE_CASE"  # USER_NAME

    @classmethod
    def parse(cls, value: "NamingCase | str") -> "NamingCase":
        """Parse a case label such as "camelCase" or "camel"."""
        if isinstance(value, NamingCase):
            return value
        if isinstance(value, str):
            for case in cls:
                if value == case.value:
                    return case
            short = _SHORT_LABELS.get(value.strip().lower())
            if short is not None:
                return short
        valid = ", ".join(case.value for case in cls)
        raise CaseConversionError(f"Unknown naming case: {value!r}. Valid: {valid}")


_SHORT_LABELS = {
    "pascal": NamingCase.PASCAL_CASE,
    "camel": NamingCase.CAMEL_CASE,
    "snake": NamingCase.SNAKE_CASE,
    "kebab": NamingCase.KEBAB_CASE,
    "screaming_snake": NamingCase.SCREAMING_SNAKE,
}

# Runs of letters and digits; \w is Unicode-aware
_CHUNK_RE = re.compile(r"[^\W_]+")


def _char_class(char: str) -> str:
    if char.isupper():
        return "upper"
    if char.isalpha():
        return "lower"
    return "digit"


def _chunk_words(chunk: str) -> List[str]:
    """Split one separator-free chunk on case and digit boundaries."""
    runs: List[List[str]] = []
    for char in chunk:
        kind = _char_class(char)
        if runs and runs[-1][0] == kind:
            runs[-1][1] += char
        else:
            runs.append([kind, char])

    tokens: List[List[str]] = []
    for kind, text in runs:
        if kind == "lower" and tokens and tokens[-1][0] == "upper":
            # HTTPServer: the last capital of an acronym starts the next word
            acronym = tokens.pop()[1]
            if len(acronym) > 1:
                tokens.append(["upper", acronym[:-1]])
            text = acronym[-1] + text
        tokens.append([kind, text])

    words: List[str] = []
    for kind, text in tokens:
        if kind == "digit" and words:
            words[-1] += text
        else:
            words.append(text.lower())
    return words


def split_words(identifier: str) -> List[str]:
    """
    Tokenize an identifier into lowercase words.

    ``user_id``, ``UserId``, ``userId`` and ``user-id`` all give
    ``["user", "id"]``. Digits stay attached to the word before them.
    Non-ASCII letters are kept, so ``café_id`` gives ``["café", "id"]``.

    Raises:
        CaseConversionError: If the identifier has no letters or digits
    """
    if not isinstance(identifier, str):
        raise CaseConversionError(f"Identifier must be a string: {identifier!r}")

    words: List[str] = []
    for chunk in _CHUNK_RE.findall(identifier):
        words.extend(_chunk_words(chunk))

    if not words:
        raise CaseConversionError(
            f"Cannot convert empty identifier: {identifier!r}"
        )
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _join_capitalized(words: List[str]) -> str:
    """
    Capitalize and concatenate words.

    A one-letter word directly followed by another one-letter word would
    read back as a single acronym ("AB"), so such runs are merged first
    to keep the output stable under repeated conversion.
    """
    merged: List[str] = []
    for word in words:
        if (
            merged
            and len(merged[-1]) == 1
            and merged[-1].isalpha()
            and word[:1].isalpha()
            and (len(word) == 1 or word[1:].isdigit())
        ):
            merged[-1] += word
        else:
            merged.append(word)
    return "".join(_capitalize(w) for w in merged)


def convert(identifier: str, target_case: "NamingCase | str") -> str:
    """
    Convert an identifier to the target naming case.

    Args:
        identifier: Raw identifier (table or column name)
        target_case: NamingCase or case label

    Returns:
        Converted identifier; converting it again gives the same string
    """
    case = NamingCase.parse(target_case)
    words = split_words(identifier)

    if case == NamingCase.SNAKE_CASE:
        return "_".join(words)
    elif case == NamingCase.CAMEL_CASE:
        return words[0] + _join_capitalized(words[1:])
    elif case == NamingCase.PASCAL_CASE:
        return _join_capitalized(words)
    elif case == NamingCase.KEBAB_CASE:
        return "-".join(words)
    elif case == NamingCase.SCREAMING_SNAKE:
        return "_".join(words).upper()

    raise CaseConversionError(f"Unsupported naming case: {case}")


def to_snake_case(identifier: str) -> str:
    return convert(identifier, NamingCase.SNAKE_CASE)


def to_camel_case(identifier: str) -> str:
    return convert(identifier, NamingCase.CAMEL_CASE)


def to_pascal_case(identifier: str) -> str:
    return convert(identifier, NamingCase.PASCAL_CASE)


def to_kebab_case(identifier: str) -> str:
    return convert(identifier, NamingCase.KEBAB_CASE)


def to_screaming_snake_case(identifier: str) -> str:
    return convert(identifier, NamingCase.SCREAMING_SNAKE)
