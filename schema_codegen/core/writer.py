"""
Output writer for rendered model files.

Lays files out by language, by table, or flat in one directory.
File names are the snake_case table name plus the language extension.
"""

from pathlib import Path
from typing import Union

from ..logging_config import get_logger
from .config import OUTPUT_STRUCTURES
from .errors import CodegenError
from .naming import to_snake_case

logger = get_logger(__name__)


class WriteError(CodegenError):
    """Raised when a rendered file cannot be written."""

    pass


class OutputWriter:
    """Persists rendered text under an output directory."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        structure: str = "by_language",
        dry_run: bool = False,
    ):
        if structure not in OUTPUT_STRUCTURES:
            raise WriteError(
                f"Invalid output structure: {structure}. "
                f"Valid: {', '.join(OUTPUT_STRUCTURES)}"
            )
        self.output_dir = Path(output_dir)
        self.structure = structure
        self.dry_run = dry_run

    def path_for(self, language: str, table_name: str, extension: str) -> Path:
        """Compute the destination path of one rendered table."""
        stem = to_snake_case(table_name)
        file_name = f"{stem}.{extension.lstrip('.')}"

        if self.structure == "by_language":
            return self.output_dir / language / file_name
        if self.structure == "by_table":
            return self.output_dir / stem / file_name
        return self.output_dir / file_name

    def write(self, language: str, table_name: str, extension: str, text: str) -> Path:
        """
        Write rendered text and return its path.

        Raises:
            WriteError: If the file or its directory cannot be created
        """
        path = self.path_for(language, table_name, extension)

        if self.dry_run:
            logger.debug(f"Dry run, not writing {path}")
            return path

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise WriteError(f"Failed to write {path}: {e}") from e

        logger.debug(f"Wrote {path}")
        return path
