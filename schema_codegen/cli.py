"""
Command-line interface for schema code generation.

Provides the ``model`` command that generates model files from a database
schema, plus ``languages`` and ``config`` informational commands.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .core import (
    CodegenConfig,
    CodegenError,
    ConfigError,
    DatabaseSchema,
    GenerationOrchestrator,
    GenerationReport,
    OutputWriter,
    load_config,
    write_default_config,
)
from .introspection import introspect_database, load_schema_snapshot, save_schema_snapshot
from .logging_config import configure_logging, get_logger
from .registry import RegistryError, get_language_info, list_all_language_info

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "codegen.yaml"

# Initialize rich console
console = Console()


def _split_csv(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated and comma-separated option values."""
    items = []
    for value in values or []:
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-codegen",
        description="Generate model code in several languages from a database schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schema-codegen model --init -c codegen.yaml
  schema-codegen model -c codegen.yaml
  schema-codegen model --db-type sqlite --dsn sqlite:./app.db -l go,typescript
  schema-codegen model --schema-file schema.json -l rust -t users,posts
  schema-codegen languages
        """.strip(),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")
    _create_model_subparser(subparsers)
    _create_languages_subparser(subparsers)
    _create_config_subparser(subparsers)
    return parser


def _create_model_subparser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "model",
        help="Generate model structs/classes from a database schema",
        description="Generate model structs/classes from a database schema",
    )

    parser.add_argument(
        "--config",
        "-c",
        metavar="FILE",
        help=f"Configuration file, YAML or JSON (default: {DEFAULT_CONFIG_FILE} if present)",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Write a default configuration file and exit",
    )

    db_group = parser.add_argument_group("database")
    db_group.add_argument(
        "--db-name", "-d", metavar="NAME", help="Override the active database name"
    )
    db_group.add_argument(
        "--db-type", metavar="TYPE", help="Override database type (mysql, postgres, sqlite)"
    )
    db_group.add_argument("--dsn", help="Override database connection string")

    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "--schema-file", metavar="FILE", help="Read the schema from a JSON snapshot"
    )
    source_group.add_argument(
        "--schema-url", metavar="URL", help="Fetch the schema snapshot from a URL"
    )

    gen_group = parser.add_argument_group("generation")
    gen_group.add_argument(
        "--lang",
        "-l",
        action="append",
        metavar="LANGS",
        help="Target language(s), comma-separated (overrides config)",
    )
    gen_group.add_argument(
        "--output", "-o", metavar="DIR", help="Output directory (overrides config)"
    )
    gen_group.add_argument(
        "--table",
        "-t",
        action="append",
        metavar="TABLES",
        help="Only generate these table(s), comma-separated (overrides config patterns)",
    )
    gen_group.add_argument(
        "--workers", "-w", type=int, metavar="N", help="Generate pairs on N threads"
    )
    gen_group.add_argument(
        "--dry-run", action="store_true", help="Render everything but write no files"
    )
    gen_group.add_argument(
        "--save-schema",
        metavar="FILE",
        help="Also save the introspected schema as a JSON snapshot",
    )
    gen_group.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any table/language pair fails",
    )
    gen_group.add_argument(
        "--verbose", "-v", action="store_true", help="Show debug logging and warnings"
    )

    parser.set_defaults(func=handle_model_command)
    return parser


def _create_languages_subparser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "languages",
        help="List built-in target languages",
        description="List built-in target languages and their defaults",
    )
    parser.add_argument(
        "--info", metavar="LANGUAGE", help="Show detailed info about one language"
    )
    parser.set_defaults(func=handle_languages_command)
    return parser


def _create_config_subparser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "config",
        help="Show the merged configuration",
        description="Show the configuration after merging onto built-in defaults",
    )
    parser.add_argument("--config", "-c", metavar="FILE", help="Configuration file")
    parser.add_argument(
        "--format", choices=["yaml", "json"], default="yaml", help="Output format"
    )
    parser.set_defaults(func=handle_config_command)
    return parser


def _resolve_config_path(path: Optional[str]) -> Optional[Path]:
    """Explicit path, else the default file if it exists, else None."""
    if path:
        return Path(path)
    default = Path(DEFAULT_CONFIG_FILE)
    return default if default.exists() else None


def _build_config(args: argparse.Namespace) -> CodegenConfig:
    """Load configuration and apply command-line overrides."""
    config_path = _resolve_config_path(args.config)
    if config_path is None:
        logger.info("No configuration file, using built-in defaults")
    config = load_config(config_path)

    return config.with_overrides(
        target_languages=_split_csv(args.lang),
        output_dir=args.output,
        tables=_split_csv(args.table),
        max_workers=args.workers,
        active_database=args.db_name,
        db_type=args.db_type,
        dsn=args.dsn,
    )


def _load_schema(args: argparse.Namespace, config: CodegenConfig) -> DatabaseSchema:
    if args.schema_file or args.schema_url:
        dialect = args.db_type
        if dialect is None and config.active_database in config.databases:
            dialect = config.databases[config.active_database].db_type
        return load_schema_snapshot(
            file_path=args.schema_file, url=args.schema_url, dialect=dialect
        )

    database = config.active_database_config()
    console.print(
        f"🔌 Introspecting [cyan]{config.active_database}[/cyan] "
        f"([dim]{database.db_type}[/dim])"
    )
    return introspect_database(database)


def handle_model_command(args: argparse.Namespace) -> int:
    """
    Handle the model command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.init:
        return _init_config(Path(args.config or DEFAULT_CONFIG_FILE))

    try:
        config = _build_config(args)
        schema = _load_schema(args, config)

        if args.save_schema:
            save_schema_snapshot(schema, args.save_schema)
            console.print(f"[green]✓[/green] Schema saved to [cyan]{args.save_schema}[/cyan]")

        console.print(
            f"📋 Found [bold]{len(schema.tables)}[/bold] tables in "
            f"[cyan]{schema.name}[/cyan] ({schema.dialect.value})"
        )

        writer = OutputWriter(
            config.generation.output_dir,
            config.generation.output_structure,
            dry_run=args.dry_run,
        )
        orchestrator = GenerationOrchestrator(config, writer=writer)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed} done"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("[green]Generating models...", total=None)

            def advance(outcome):
                progress.update(
                    task,
                    advance=1,
                    description=f"[green]Generating {outcome.language}/{outcome.table}",
                )

            report = orchestrator.run(schema, on_pair_done=advance)

    except CodegenError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1

    _print_report(report, config, args)

    if args.strict and report.has_failures:
        return 1
    return 0


def _init_config(path: Path) -> int:
    try:
        write_default_config(path)
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        return 1

    console.print(f"[green]✓[/green] Default configuration created at [cyan]{path}[/cyan]")
    console.print("[dim]Edit it to match your database, then run 'schema-codegen model'.[/dim]")
    return 0


def _print_report(report: GenerationReport, config: CodegenConfig, args: argparse.Namespace):
    """Show per-language results, failures and warnings."""
    table = Table(title="📊 Generation Summary", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Rendered", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")

    for language, outcomes in report.by_language().items():
        rendered = sum(1 for o in outcomes if o.succeeded)
        failed = len(outcomes) - rendered
        table.add_row(language, str(rendered), str(failed) if failed else "[dim]0[/dim]")

    console.print()
    console.print(table)

    if report.failed:
        console.print("\n[red]✗ Failures:[/red]")
        for outcome in report.failed:
            console.print(
                f"  [red]•[/red] {outcome.language}/{outcome.table} "
                f"[dim]({outcome.error_type})[/dim] {outcome.error}"
            )

    warnings = report.warnings
    if warnings:
        if args.verbose:
            console.print("\n[yellow]⚠️  Warnings:[/yellow]")
            for warning in warnings:
                console.print(f"  [yellow]•[/yellow] {warning}")
        else:
            console.print(
                f"\n[yellow]⚠️  {len(warnings)} warnings[/yellow] [dim](use --verbose to show)[/dim]"
            )

    if not report.tables:
        console.print("\n[yellow]⚠️  No tables matched the table patterns[/yellow]")

    summary = report.summary()
    target = "would be written to" if args.dry_run else "written to"
    console.print(
        f"\n[green]✓[/green] {summary['rendered']} files {target} "
        f"[cyan]{config.generation.output_dir}[/cyan]"
    )


def handle_languages_command(args: argparse.Namespace) -> int:
    """List built-in languages, or show one in detail."""
    if args.info:
        return _show_language_info(args.info)

    language_info = list_all_language_info()

    table = Table(title="📋 Built-in Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Nullable Strategy")
    table.add_column("Template", style="dim")
    table.add_column("Aliases", style="blue")

    for name, info in sorted(language_info.items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(
            f"🔧 {name}",
            info["file_extension"],
            info["nullable_strategy"],
            info["template_file"] or "[dim]none (set template_path)[/dim]",
            aliases,
        )

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] schema-codegen model [dim]-c codegen.yaml[/dim] -l [cyan]LANGUAGE[/cyan]\n"
            "[bold]Info:[/bold] schema-codegen languages --info [cyan]LANGUAGE[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_language_info(language: str) -> int:
    try:
        info = get_language_info(language)
    except RegistryError as e:
        console.print(f"[red]✗[/red] {e}")
        return 1

    config = load_config().language(info["name"])

    info_text = (
        f"[bold]Language:[/bold] {info['name']}\n"
        f"[bold]File Extension:[/bold] {info['file_extension']}\n"
        f"[bold]Template:[/bold] {info['template_file'] or 'none'}\n"
        f"[bold]Nullable Strategy:[/bold] {config.nullable_strategy.value}"
    )
    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(Panel(info_text, title=f"🔧 {info['name'].title()}", border_style="green"))

    if config.generic_types:
        types_table = Table(
            title="⚙️  Generic Type Defaults",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        types_table.add_column("Generic", style="bold")
        types_table.add_column("Type", style="green")
        for label, lang_type in config.generic_types.items():
            types_table.add_row(label, lang_type)
        console.print()
        console.print(types_table)

    return 0


def handle_config_command(args: argparse.Namespace) -> int:
    """Print the merged configuration."""
    try:
        config = load_config(_resolve_config_path(args.config))
    except CodegenError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1

    if args.format == "json":
        text = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
    else:
        text = yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True)

    console.print(Syntax(text, args.format, theme="monokai"))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
