"""Base exception for schema_codegen.

Each module defines its own subclasses next to the code that raises them.
"""


class CodegenError(Exception):
    """Base exception for all code generation errors."""

    pass
