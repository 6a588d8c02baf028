"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from src.code_parsing.models import Modifiers, ParsedCodeFile, Type, TypeDetails

console = Console()


def show_error(title: str, message: str) -> None:
    """Display an error message."""
    console.print()
    console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="green",
        )
    )


def format_modifiers(modifiers: Modifiers) -> str:
    """Render modifiers the way a Java declaration would read."""
    words = [] if modifiers.visibility.value == "default" else [modifiers.visibility.value]
    if modifiers.is_abstract:
        words.append("abstract")
    if modifiers.is_static:
        words.append("static")
    if modifiers.is_final:
        words.append("final")
    return " ".join(words)


def _names(types: tuple[Type, ...]) -> str:
    return ", ".join(t.qualified_name for t in types)


def show_parsed_file(path: str, language: str, parsed: ParsedCodeFile) -> None:
    """Display the imports and types of one parsed file."""
    console.print()
    console.print(f"[bold cyan]{escape(path)}[/] [dim]({language})[/]")

    if parsed.imports:
        console.print(f"\n[green]Imports ({len(parsed.imports)}):[/]")
        for imp in parsed.imports:
            console.print(f"  {escape(imp.value)}")

    if not parsed.types:
        console.print("\n[dim]No type declarations found.[/]")
        return

    table = Table(title=f"Types ({len(parsed.types)})", title_justify="left")
    table.add_column("Type", style="bold")
    table.add_column("Kind", style="cyan")
    table.add_column("Modifiers")
    table.add_column("Super classes", style="dim")
    table.add_column("Interfaces", style="dim")

    for type_ in parsed.types:
        table.add_row(
            escape(type_.qualified_name),
            type_.type.value,
            format_modifiers(type_.modifiers),
            escape(_names(type_.super_classes)),
            escape(_names(type_.interfaces)),
        )

    console.print()
    console.print(table)


def show_type_details(details: list[TypeDetails]) -> None:
    """Display the members of each type."""
    for detail in details:
        table = Table(
            title=f"{detail.type.qualified_name} members",
            title_justify="left",
        )
        table.add_column("Member", style="bold")
        table.add_column("Modifiers")
        table.add_column("Type / Signature", style="dim")

        for field in detail.field_members:
            table.add_row(
                escape(field.name),
                format_modifiers(field.modifiers),
                escape(field.type.qualified_name),
            )
        for method in detail.method_members:
            table.add_row(
                escape(f"{method.name}()"),
                format_modifiers(method.modifiers),
                escape(method.signature),
            )

        console.print()
        console.print(table)


def show_languages(rows: list[tuple[str, list[str]]]) -> None:
    """Display registered languages and their extensions."""
    table = Table(title="Supported languages", title_justify="left")
    table.add_column("Language", style="bold cyan")
    table.add_column("Extensions")
    for language, extensions in rows:
        table.add_row(language, ", ".join(extensions))
    console.print(table)
