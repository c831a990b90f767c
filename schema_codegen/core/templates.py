"""
Jinja2 rendering of model files.

Templates are looked up in memory, then in the user's template
directory, then among the templates shipped with the package.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    select_autoescape,
)

from ..logging_config import get_logger
from .config import LanguageConfig
from .context import RenderContext
from .errors import CodegenError
from .naming import (
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_screaming_snake_case,
    to_snake_case,
)

logger = get_logger(__name__)

BUILTIN_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

# Built-in template per output extension, used when a language names none
DEFAULT_TEMPLATES = {
    "rs": "rust_struct.rs.j2",
    "ts": "typescript_interface.ts.j2",
    "go": "go_struct.go.j2",
    "py": "python_dataclass.py.j2",
    "java": "java_class.java.j2",
    "cs": "csharp_class.cs.j2",
}


class TemplateError(CodegenError):
    """A template is missing, malformed or failed while rendering."""

    pass


def _case_filter(converter: Callable[[str], str]) -> Callable[[Any], str]:
    def case_filter(value):
        text = str(value)
        return converter(text) if text else text

    return case_filter


def pluralize(value: Any) -> str:
    """Naive English plural of a noun."""
    word = str(value)
    lower = word.lower()
    if not word:
        return word
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower.endswith("y") and lower[-2:-1] not in ("a", "e", "i", "o", "u"):
        return word[:-1] + "ies"
    return word + "s"


def upper_first(value: Any) -> str:
    text = str(value)
    return text[:1].upper() + text[1:]


def lower_first(value: Any) -> str:
    text = str(value)
    return text[:1].lower() + text[1:]


def indent_lines(value: Any, spaces: int = 4) -> str:
    """Prefix every non-blank line with spaces."""
    pad = " " * spaces
    return "\n".join(pad + line if line.strip() else line for line in str(value).split("\n"))


def comment_lines(value: Any, style: str = "//") -> str:
    """Turn every non-blank line into a line comment."""
    return "\n".join(
        f"{style} {line}" if line.strip() else line for line in str(value).split("\n")
    )


FILTERS: Dict[str, Callable[..., str]] = {
    "snake_case": _case_filter(to_snake_case),
    "camel_case": _case_filter(to_camel_case),
    "pascal_case": _case_filter(to_pascal_case),
    "kebab_case": _case_filter(to_kebab_case),
    "screaming_snake_case": _case_filter(to_screaming_snake_case),
    "pluralize": pluralize,
    "upper_first": upper_first,
    "lower_first": lower_first,
    "indent": indent_lines,
    "comment": comment_lines,
}


class TemplateEngine:
    """Renders RenderContext values through Jinja2 templates."""

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            template_dir: Directory searched before the built-in templates
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._memory = DictLoader({})
        self._env = self._build_environment()

    def _build_environment(self) -> Environment:
        search = [self._memory]
        if self.template_dir is not None:
            if self.template_dir.is_dir():
                search.append(FileSystemLoader(str(self.template_dir)))
            else:
                logger.warning(f"Template directory not found: {self.template_dir}")
        search.append(FileSystemLoader(str(BUILTIN_TEMPLATE_DIR)))

        env = Environment(
            loader=ChoiceLoader(search),
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters.update(FILTERS)
        return env

    def render(self, context: RenderContext, language: LanguageConfig) -> str:
        """
        Render a table's context with the language's template.

        The template comes from ``template_path`` if set, else
        ``template_file``, else the built-in template for the extension.

        Raises:
            TemplateError: If no template is found or rendering fails
        """
        variables = context.to_dict()

        if language.template_path:
            path = Path(language.template_path)
            try:
                source = path.read_text(encoding="utf-8")
            except OSError as e:
                raise TemplateError(f"Failed to read template {path}: {e}") from e
            return format_code(self.render_string(source, variables))

        template_name = language.template_file or DEFAULT_TEMPLATES.get(language.extension)
        if not template_name:
            raise TemplateError(
                f"No template configured for language '{language.name}'. "
                "Set template_file or template_path in its configuration."
            )
        return format_code(self.render_template(template_name, variables))

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template found through the loader chain."""
        try:
            return self._env.get_template(template_name).render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def render_string(self, source: str, context: Dict[str, Any]) -> str:
        """Render template source that does not live in the loader chain."""
        try:
            return self._env.from_string(source).render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def add_template(self, name: str, content: str):
        """Register an in-memory template; it shadows files with the same name."""
        self._memory.mapping[name] = content

    def template_exists(self, template_name: str) -> bool:
        return template_name in self._env.list_templates()


def format_code(code: str) -> str:
    """
    Tidy rendered output.

    Strips trailing whitespace, keeps at most two consecutive blank lines
    and ends the text with exactly one newline.
    """
    lines = []
    blanks = 0
    for raw in code.split("\n"):
        line = raw.rstrip()
        blanks = blanks + 1 if not line else 0
        if blanks <= 2:
            lines.append(line)
    return "\n".join(lines).strip("\n") + "\n"


def create_template_engine(template_dir: Optional[Union[str, Path]] = None) -> TemplateEngine:
    """Create a template engine searching ``template_dir`` first."""
    return TemplateEngine(template_dir)
