"""CLI entry point for label-authz."""

import json
import sys
from pathlib import Path
from typing import NoReturn

import typer
import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from label_authz.authorization import build_label_set, check_authorization_by_map
from label_authz.expression import (
    AccessToken,
    And,
    AuthorizationExpressionError,
    Expression,
    evaluate,
    format_expression,
    parse,
    to_dict,
)
from label_authz.utils.config import load_config
from label_authz.utils.logging import get_logger, setup_logging

app = typer.Typer(name="label-authz", help="Evaluate label authorization expressions")
console = Console()
log = get_logger("authz.cli")

EXIT_DENIED = 1
EXIT_INVALID = 2


@app.callback()
def main_options(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON"),
) -> None:
    """Evaluate boolean label expressions such as 'a & (b | c)'."""
    setup_logging(debug=debug, json_output=json_logs)
    # Flags given on the command line win over a config file's logging section
    ctx.obj = {"logging_from_flags": debug or json_logs}


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(EXIT_INVALID)


@app.command()
def check(
    expression: str = typer.Argument(..., help="Authorization expression"),
    auth: str = typer.Option(..., "--auth", "-a", help="Comma-separated labels held"),
    strict: bool = typer.Option(
        False, "--strict", help="Reject empty items in --auth"
    ),
) -> None:
    """Check whether the given labels satisfy an expression.

    Exits 0 when allowed, 1 when denied and 2 when the input is invalid.

    Examples:
        label-authz check 'admin | (staff & reviewer)' --auth staff,reviewer
    """
    try:
        labels = build_label_set(auth, strict=strict)
        allowed = check_authorization_by_map(expression, labels)
    except AuthorizationExpressionError as e:
        _fail(str(e))

    if allowed:
        console.print("[green]ALLOW[/green]")
    else:
        console.print("[red]DENY[/red]")
        sys.exit(EXIT_DENIED)


def _add_branch(parent: Tree, expression: Expression) -> None:
    stack = [(parent, expression)]
    while stack:
        branch, node = stack.pop()
        if isinstance(node, AccessToken):
            branch.add(f"[cyan]{escape(node.label)}[/cyan]")
            continue
        name = "AND" if isinstance(node, And) else "OR"
        group = branch.add(f"[bold]{name}[/bold]")
        # Reversed so children are popped, and added, in stored order
        stack.extend((group, child) for child in reversed(node.children))


@app.command("parse")
def parse_command(
    expression: str = typer.Argument(..., help="Authorization expression"),
    as_json: bool = typer.Option(False, "--json", help="Print the tree as JSON"),
) -> None:
    """Parse an expression and show its tree."""
    try:
        tree = parse(expression)
    except AuthorizationExpressionError as e:
        _fail(str(e))

    if as_json:
        payload = {"expression": format_expression(tree), "tree": to_dict(tree)}
        try:
            text = json.dumps(payload, indent=2)
        except RecursionError:
            # The json encoder recurses once per level of nesting
            _fail("expression is nested too deeply to print as JSON")
        typer.echo(text)
        return

    root = Tree(f"[bold]{escape(format_expression(tree))}[/bold]")
    _add_branch(root, tree)
    console.print(root)


@app.command()
def policies(
    ctx: typer.Context,
    auth: str = typer.Option(..., "--auth", "-a", help="Comma-separated labels held"),
    config: Path = typer.Option(
        Path("config/default.yaml"), "--config", "-c", help="YAML config with policies"
    ),
) -> None:
    """Evaluate every named policy in a config file."""
    try:
        settings = load_config(config)
    except FileNotFoundError as e:
        _fail(str(e))
    except ValidationError as e:
        _fail(f"invalid config {config}: {e}")
    except yaml.YAMLError as e:
        _fail(f"invalid YAML in {config}: {e}")
    except ValueError as e:
        _fail(str(e))

    if not (ctx.obj or {}).get("logging_from_flags"):
        setup_logging(
            level=settings.logging.level, json_output=settings.logging.json_output
        )

    try:
        labels = build_label_set(auth, strict=settings.labels.strict)
    except AuthorizationExpressionError as e:
        _fail(str(e))

    log.info("policies_loaded", path=str(config), count=len(settings.policies))

    table = Table(title="Policy Results", show_header=True)
    table.add_column("Policy", style="cyan")
    table.add_column("Expression")
    table.add_column("Result", justify="center")

    for name, expression in settings.policies.items():
        allowed = evaluate(parse(expression), labels)
        result = "[green]ALLOW[/]" if allowed else "[red]DENY[/]"
        table.add_row(escape(name), escape(expression), result)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from label_authz import __version__

    console.print(f"label-authz version {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
