"""Dispatch CLI commands."""

import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .templates import buffer_options, make_buffer, print_fields, unescape

console = Console()


def parse_condition(text):
    """CLI condition: a fact or named condition, '!' to negate, or a JSON object."""
    from ...dispatch import as_condition, negate

    text = text.strip()
    if text.startswith("{"):
        return as_condition(json.loads(text))
    if text.startswith("!"):
        return negate(text[1:])
    return as_condition(text)


@click.command()
@click.argument("trigger")
@click.option(
    "-r", "--rule", "rules", multiple=True, metavar="CONDITION=TEMPLATE",
    help="Register a template; later rules are tried first"
)
@click.option("-m", "--mode", default=None, help="Surface mode (selects the table)")
@buffer_options
@click.option("-v", "--verbose", is_flag=True, help="Show facts and field spans")
def expand(trigger, rules, mode, before, after, comment, indent_width, cursor, verbose):
    """Expand a trigger word against conditional rules.

    Examples:

        snippetmanager expand if -r 'atLineStart=if $${cond}\\n$>$.\\nend' -r 'insideComment=IF'

        snippetmanager expand if -r '!atLineStart=if $${cond} then $. end' --before 'x = '
    """
    from ... import SnippetManager

    buffer = make_buffer(before, after, comment, indent_width, mode=mode)
    manager = SnippetManager(buffer)

    for rule in rules:
        condition, sep, template = rule.partition("=")
        if not sep:
            raise click.BadParameter(f"expected CONDITION=TEMPLATE, got {rule!r}", param_hint="--rule")
        manager.register(mode, trigger, parse_condition(condition), unescape(template))

    result = manager.expand(trigger, mode)

    style = "green" if result.expanded else "yellow"
    console.print(f"[{style}]{result.outcome.value}[/{style}] (table: {result.table_name})")
    console.print(Panel(Text(buffer.render(cursor)), title="Buffer"))

    if result.error:
        console.print(f"[red]Error:[/red] {result.error}")

    if verbose:
        if result.facts is not None:
            table = Table(title="Context Facts")
            table.add_column("Fact", style="cyan")
            table.add_column("Value", style="green")
            for name, value in result.facts.to_dict().items():
                table.add_row(name, repr(value))
            console.print(table)
        if result.instance is not None and result.instance.active:
            print_fields(result.instance, buffer)


@click.command(name="conditions")
def list_conditions():
    """List the named conditions rules can refer to."""
    from ...core.registry import condition_registry

    table = Table(title="Named Conditions")
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for item in condition_registry.describe():
        table.add_row(item["name"], item.get("description", ""))

    console.print(table)
