"""Template inspection CLI commands."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.markup import escape

console = Console()


def unescape(text: str) -> str:
    """Turn shell-friendly \\n and \\t sequences into real characters."""
    return text.replace("\\n", "\n").replace("\\t", "\t")


def buffer_options(func):
    """Options shared by commands that build an in-memory buffer."""
    func = click.option("--before", default="", help="Text before point")(func)
    func = click.option("--after", default="", help="Text after point")(func)
    func = click.option("--comment", default="#", help="Line comment prefix")(func)
    func = click.option("--indent-width", default=4, type=int, help="Columns per indent level")(func)
    func = click.option("--cursor", default="|", help="Cursor marker in the output")(func)
    return func


def make_buffer(before, after, comment, indent_width, mode=None):
    from ...buffer import TextBuffer

    before, after = unescape(before), unescape(after)
    return TextBuffer(
        before + after,
        position=len(before),
        mode=mode,
        line_comment=comment or None,
        indent_width=indent_width,
    )


def print_fields(instance, buffer):
    """Show the field spans of a snippet instance."""
    table = Table(title="Fields")
    table.add_column("#", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Span")
    table.add_column("Text")

    for index, field in enumerate(instance.fields):
        start, end = buffer.span_start(field.handle), buffer.span_end(field.handle)
        table.add_row(
            str(index),
            escape(field.name or "-"),
            escape(f"[{start}, {end})"),
            escape(repr(buffer.text_between(start, end))),
        )

    console.print(table)


@click.command()
@click.argument("template")
@click.option("--raw", is_flag=True, help="Do not interpret \\n and \\t escapes")
def tokens(template, raw):
    """Split a template into tokens.

    Examples:

        snippetmanager tokens 'for $${x} in $${xs}:\\n$>$.'
    """
    from ...templates import compile_template

    compiled = compile_template(template if raw else unescape(template))

    table = Table(title="Tokens")
    table.add_column("#", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Value")
    for i, token in enumerate(compiled.tokens):
        if token.kind.value == "literal":
            value = repr(token.text)
        elif token.kind.value == "field":
            value = f"name={token.name!r} default={token.default!r}"
        else:
            value = ""
        table.add_row(str(i), token.kind.value, escape(value))
    console.print(table)

    layout = compiled.layout
    console.print(f"[cyan]Fields:[/cyan] {len(layout.fields)}  "
                  f"[cyan]Exit:[/cyan] {layout.exit_offset if layout.has_exit else 'synthesized'}")


@click.command()
@click.argument("template")
@buffer_options
@click.option("-v", "--verbose", is_flag=True, help="Show field spans")
def render(template, before, after, comment, indent_width, cursor, verbose):
    """Instantiate a template into an in-memory buffer.

    Examples:

        snippetmanager render 'if $${cond}:\\n$>$.' --before 'x = 1\\n'

        snippetmanager render 'def $${name}($${args}):\\n$>$.' -v
    """
    from ... import SnippetManager

    buffer = make_buffer(before, after, comment, indent_width)
    manager = SnippetManager(buffer)
    instance = manager.insert_snippet(unescape(template))

    console.print(Panel(Text(buffer.render(cursor)), title="Buffer"))
    if verbose:
        print_fields(instance, buffer)
