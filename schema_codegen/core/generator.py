"""
Generation orchestration.

Runs every (language, table) pair through context assembly, rendering
and writing. A failure in one pair is recorded in the report and never
stops the other pairs.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..logging_config import get_logger
from .config import CodegenConfig, ConfigError, LanguageConfig
from .context import RenderContextAssembler
from .errors import CodegenError
from .filters import TableFilter
from .schema import DatabaseSchema, Table
from .tags import TagExpansionWarning
from .templates import TemplateEngine
from .types import TypeMappingResolver
from .writer import OutputWriter

logger = get_logger(__name__)


class PairState(Enum):
    """Lifecycle of one (language, table) pair."""

    PENDING = "pending"
    RESOLVING = "resolving"
    RENDERED = "rendered"
    FAILED = "failed"


@dataclass
class PairOutcome:
    """Result slot of one (language, table) pair."""

    language: str
    table: str
    state: PairState = PairState.PENDING
    text: Optional[str] = None
    path: Optional[Path] = None
    error: Optional[CodegenError] = None
    warnings: List[str] = field(default_factory=list)
    tag_warnings: List[TagExpansionWarning] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == PairState.RENDERED

    @property
    def error_type(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None


@dataclass
class GenerationReport:
    """Outcome of every pair of a run, language-major then table order."""

    outcomes: List[PairOutcome] = field(default_factory=list)
    languages: Sequence[str] = ()
    tables: Sequence[str] = ()

    # A report is only produced when the run itself completed
    success: bool = True

    @property
    def rendered(self) -> List[PairOutcome]:
        return [o for o in self.outcomes if o.state == PairState.RENDERED]

    @property
    def failed(self) -> List[PairOutcome]:
        return [o for o in self.outcomes if o.state == PairState.FAILED]

    @property
    def has_failures(self) -> bool:
        return any(o.state == PairState.FAILED for o in self.outcomes)

    @property
    def warnings(self) -> List[str]:
        return [
            f"{o.language}/{o.table}: {warning}"
            for o in self.outcomes
            for warning in o.warnings
        ]

    def by_language(self) -> Dict[str, List[PairOutcome]]:
        """Group outcomes per language, keeping languages with no tables."""
        grouped: Dict[str, List[PairOutcome]] = {lang: [] for lang in self.languages}
        for outcome in self.outcomes:
            grouped.setdefault(outcome.language, []).append(outcome)
        return grouped

    def summary(self) -> Dict[str, int]:
        return {
            "languages": len(self.languages),
            "tables": len(self.tables),
            "pairs": len(self.outcomes),
            "rendered": len(self.rendered),
            "failed": len(self.failed),
            "warnings": len(self.warnings),
        }


class GenerationOrchestrator:
    """Runs the (language, table) cross product for one configuration."""

    def __init__(
        self,
        config: CodegenConfig,
        renderer: Optional[TemplateEngine] = None,
        writer: Optional[OutputWriter] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Merged, immutable configuration for the run
            renderer: Template renderer (defaults to the Jinja2 engine)
            writer: Output writer; rendered text is only kept in the report if None
        """
        self.config = config
        self.renderer = renderer or TemplateEngine(config.generation.template_dir)
        self.writer = writer
        self.assembler = RenderContextAssembler(
            config.naming, TypeMappingResolver(config.type_mappings)
        )

    def select_tables(self, schema: DatabaseSchema) -> List[Table]:
        """
        Apply the table patterns once for the whole run.

        Raises:
            InvalidPatternError: If a pattern is malformed
        """
        patterns = self.config.generation.table_patterns
        table_filter = TableFilter(patterns.include, patterns.exclude)
        tables = table_filter.select(schema.tables)
        logger.info(
            f"Selected {len(tables)} of {len(schema.tables)} tables with {table_filter!r}"
        )
        return tables

    def run(
        self,
        schema: DatabaseSchema,
        languages: Optional[Sequence[str]] = None,
        on_pair_done: Optional[Callable[[PairOutcome], None]] = None,
    ) -> GenerationReport:
        """
        Generate every selected table for every language.

        Args:
            schema: Introspected schema
            languages: Languages to generate (defaults to the configured targets)
            on_pair_done: Called after each pair finishes, e.g. to advance progress

        Returns:
            Report with one outcome per pair

        Raises:
            ConfigError: If no target language is given
            InvalidPatternError: If a table pattern is malformed
        """
        if languages is None:
            languages = self.config.generation.target_languages
        names = [self.config.registry.canonical_name(lang) for lang in languages]
        names = list(dict.fromkeys(names))
        if not names:
            raise ConfigError("No target languages configured")

        tables = self.select_tables(schema)
        language_configs = {name: self.config.language(name) for name in names}

        jobs = [(language_configs[name], table) for name in names for table in tables]
        report = GenerationReport(
            outcomes=[PairOutcome(language=lang.name, table=table.name) for lang, table in jobs],
            languages=tuple(names),
            tables=tuple(table.name for table in tables),
        )

        def process(index: int):
            language, table = jobs[index]
            outcome = report.outcomes[index]
            self._process_pair(outcome, language, table, schema)
            if on_pair_done is not None:
                on_pair_done(outcome)

        max_workers = self.config.generation.max_workers
        if max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(process, i) for i in range(len(jobs))]
                for future in futures:
                    future.result()
        else:
            for i in range(len(jobs)):
                process(i)

        summary = report.summary()
        logger.info(
            f"Generation finished: {summary['rendered']} rendered, "
            f"{summary['failed']} failed, {summary['warnings']} warnings"
        )
        return report

    def _process_pair(
        self,
        outcome: PairOutcome,
        language: LanguageConfig,
        table: Table,
        schema: DatabaseSchema,
    ):
        """Fill one outcome slot. Pair-level errors are captured, not raised."""
        outcome.state = PairState.RESOLVING
        try:
            assembled = self.assembler.assemble(table, language, schema.dialect)
            outcome.warnings.extend(assembled.warnings)
            outcome.tag_warnings.extend(assembled.tag_warnings)

            outcome.text = self.renderer.render(assembled.context, language)

            if self.writer is not None:
                outcome.path = self.writer.write(
                    language.name, table.name, language.extension, outcome.text
                )
        except CodegenError as e:
            outcome.state = PairState.FAILED
            outcome.error = e
            logger.warning(
                f"Failed to generate {language.name} for table {table.name}: {e}"
            )
            return

        for warning in outcome.warnings:
            logger.warning(f"{language.name}/{table.name}: {warning}")
        outcome.state = PairState.RENDERED


def generate(
    schema: DatabaseSchema,
    config: CodegenConfig,
    renderer: Optional[TemplateEngine] = None,
    writer: Optional[OutputWriter] = None,
    languages: Optional[Sequence[str]] = None,
) -> GenerationReport:
    """
    Generate model code for a schema with error isolation per pair.

    Args:
        schema: Introspected schema
        config: Merged configuration
        renderer: Template renderer (defaults to the Jinja2 engine)
        writer: Output writer (nothing is written if None)
        languages: Languages to generate (defaults to the configured targets)

    Returns:
        GenerationReport
    """
    return GenerationOrchestrator(config, renderer, writer).run(schema, languages)
