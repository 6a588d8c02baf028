"""Main CLI entry point for codeparse."""

import json
import sys
from pathlib import Path

import click

from src.cli.display import (
    console,
    show_error,
    show_languages,
    show_parsed_file,
    show_success,
    show_type_details,
)
from src.code_parsing.base import CodeParser
from src.code_parsing.languages.base import TreeSitterHandler
from src.code_parsing.registry import get_registry
from src.core.config.settings import get_settings
from src.core.exceptions.errors import CodeParseError
from src.core.logger.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _select_language(path: Path, language: str | None) -> str:
    """Explicit --language, then the file extension, then the configured default."""
    registry = get_registry()
    if language:
        return language.lower()
    if registry.can_handle(path):
        return registry.language_for_path(path)

    default_language = get_settings().parser.default_language
    if default_language:
        logger.info(f"No handler for {path.suffix or 'files without extension'}, using {default_language}")
        return default_language
    return registry.language_for_path(path)


def _read_source(path: Path) -> str:
    max_bytes = get_settings().parser.max_source_bytes
    size = path.stat().st_size
    if size > max_bytes:
        raise CodeParseError(
            f"File is larger than {max_bytes} bytes",
            details={"path": str(path), "size": size},
        )
    return path.read_text(encoding="utf-8")


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """codeparse - extract imports and type declarations from source files."""
    if version:
        from src import __version__

        click.echo(f"codeparse version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.option("--path", "-p", required=True, type=click.Path(exists=True, dir_okay=False), help="Source file to parse")
@click.option("--language", "-l", help="Language handler to use (default: from file extension)")
@click.option("--module", "-m", "module_name", help="Module name used as the package of Python types")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.option("--details", "-d", is_flag=True, help="Include fields and methods of each type")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write JSON output to a file")
@click.option("--verbose", is_flag=True, help="Verbose logging")
def parse(
    path: str,
    language: str | None,
    module_name: str | None,
    output_format: str,
    details: bool,
    output: str | None,
    verbose: bool,
) -> None:
    """Parse a source file into imports and types.

    Examples:
        codeparse parse --path src/Main.java
        codeparse parse -p app/models.py -m app.models -f json --details
        codeparse parse -p Main.java -o parsed.json
    """
    if verbose:
        setup_logging(level="DEBUG")

    source_path = Path(path)

    try:
        selected = _select_language(source_path, language)
        options = {"module_name": module_name} if module_name else {}
        handler = get_registry().get_handler(selected, **options)
        code = _read_source(source_path)

        parsed = CodeParser(handler).parse_code(code)
        type_details = None
        if details and isinstance(handler, TreeSitterHandler):
            type_details = handler.parse_type_details(code)
    except CodeParseError as e:
        show_error("Parse Failed", str(e))
        sys.exit(1)
    except (OSError, UnicodeDecodeError) as e:
        show_error("Read Failed", f"{source_path}: {e}")
        sys.exit(1)

    if output_format == "json" or output:
        payload = parsed.model_dump(mode="json", by_alias=True)
        if type_details is not None:
            payload["typeDetails"] = [
                d.model_dump(mode="json", by_alias=True) for d in type_details
            ]
        text = json.dumps(payload, indent=2)

        if output:
            Path(output).write_text(text, encoding="utf-8")
            show_success("Parse Complete", f"Output written to: {output}")
        else:
            click.echo(text)
        return

    show_parsed_file(str(source_path), selected, parsed)
    if type_details:
        show_type_details(type_details)


@main.command()
def languages() -> None:
    """List the languages that can be parsed."""
    registry = get_registry()
    rows = [(lang, registry.extensions(lang)) for lang in registry.languages()]
    if not rows:
        console.print("[yellow]No language handlers registered.[/]")
        return
    show_languages(rows)


if __name__ == "__main__":
    main()
