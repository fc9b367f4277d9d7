"""Main CLI entry point."""

import logging

import click

from .commands import tokens, render, expand, list_conditions


@click.group()
@click.version_option(version="1.0.0", prog_name="snippetmanager")
@click.option("--debug", is_flag=True, help="Log engine decisions")
def cli(debug):
    """SnippetManager - conditional snippet expansion.

    Try templates and dispatch rules against an in-memory buffer.

    \b
    Examples:
        snippetmanager tokens 'for $${x} in $${xs}:\\n$>$.'
        snippetmanager render 'def $${name}():\\n$>$.' -v
        snippetmanager expand if -r 'atLineStart=if $${cond}\\n$.\\nend'
        snippetmanager conditions

    Use --help on any command for more details.
    """
    if debug:
        from ..core.config import LoggingSettings
        from ..core.logging_config import setup_logging

        setup_logging(LoggingSettings(level="DEBUG"))
        logging.getLogger("snippetmanager").debug("Debug logging enabled")


cli.add_command(tokens)
cli.add_command(render)
cli.add_command(expand)
cli.add_command(list_conditions)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
