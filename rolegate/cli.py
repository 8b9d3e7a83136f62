"""CLI entry point for rolegate."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from rolegate.access import RoleRegistry, evaluate_detailed
from rolegate.access.models import PermissionRequest, Statements
from rolegate.config import RolegateConfig, build_registry, load_config
from rolegate.config.loader import DEFAULT_CONFIG_TEMPLATE
from rolegate.errors import PermissionRequestError, RoleConfigError

app = typer.Typer(
    name="rolegate",
    help="Role-based permission checks for organization members.",
)

config_app = typer.Typer(help="Manage rolegate configuration.")
app.add_typer(config_app, name="config")

# Exit codes for `check`
EXIT_ALLOWED = 0
EXIT_DENIED = 1
EXIT_MALFORMED = 2

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Global state
_config: RolegateConfig | None = None


class _JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _configure_logging(cfg: RolegateConfig) -> None:
    handler = logging.StreamHandler()
    if cfg.log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


def _get_config() -> RolegateConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to rolegate.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_MALFORMED)
    _configure_logging(_config)


def _resolve_registry(roles_file: str | None) -> RoleRegistry:
    """Registry from config, with --roles replacing the configured roles file."""
    cfg = _get_config()
    if roles_file is not None:
        cfg = cfg.model_copy(update={"roles_file": roles_file})
    try:
        return build_registry(cfg)
    except RoleConfigError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_MALFORMED)


def _parse_permissions(values: list[str]) -> Statements:
    """Turn ``resource:action`` strings into a resource -> actions mapping."""
    statements: Statements = {}
    for value in values:
        resource, sep, action = value.partition(":")
        if not sep or not resource or not action:
            raise PermissionRequestError("invalid", f"expected resource:action, got {value!r}")
        statements.setdefault(resource, []).append(action)
    return statements


@app.command()
def check(
    role: str = typer.Argument(..., help="Comma-separated role ids, e.g. admin,editor"),
    permission: Annotated[
        list[str] | None,
        typer.Option("--permission", "-p", help="Required permission as resource:action (repeatable)"),
    ] = None,
    legacy: bool = typer.Option(False, "--legacy", help="Send the request in the singular 'permission' shape"),
    roles: Annotated[
        str | None, typer.Option("--roles", "-r", help="Roles YAML file to evaluate against")
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: table or json")
    ] = "table",
) -> None:
    """Check whether ROLE holds every requested permission."""
    registry = _resolve_registry(roles)

    try:
        statements = _parse_permissions(permission or [])
        key = "permission" if legacy else "permissions"
        decision = evaluate_detailed(role, PermissionRequest.coerce({key: statements}), registry)
    except PermissionRequestError as e:
        rprint(f"[red]Malformed request:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_MALFORMED)

    if format == "json":
        typer.echo(decision.model_dump_json(indent=2))
    else:
        table = Table(title=f"Permission check for {escape(role)}")
        table.add_column("Permission", style="cyan")
        table.add_column("Status", justify="center")
        seen: set[str] = set()
        missing = {str(p) for p in decision.missing}
        for perm in decision.required:
            token = str(perm)
            if token in seen:
                continue
            seen.add(token)
            status = "[red]DENIED[/red]" if token in missing else "[green]GRANTED[/green]"
            table.add_row(escape(token), status)
        rprint(table)
        verdict = "[green]ALLOWED[/green]" if decision.allowed else "[red]DENIED[/red]"
        rprint(f"[bold]Result:[/bold] {verdict}")

    raise typer.Exit(EXIT_ALLOWED if decision.allowed else EXIT_DENIED)


@app.command(name="roles")
def list_roles(
    roles: Annotated[
        str | None, typer.Option("--roles", "-r", help="Roles YAML file to list")
    ] = None,
) -> None:
    """List roles and the permissions they grant."""
    registry = _resolve_registry(roles)
    if not len(registry):
        rprint("[yellow]No roles defined.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Roles ({len(registry)})")
    table.add_column("Role", style="cyan")
    table.add_column("Description")
    table.add_column("Grants", style="green")
    for role_id in registry.roles():
        definition = registry.definition(role_id)
        grants = sorted(str(p) for p in registry.lookup(role_id))
        table.add_row(
            role_id,
            escape((definition.description if definition else None) or "-"),
            ", ".join(grants) if grants else "-",
        )
    rprint(table)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    import yaml

    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(exclude_none=True), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default rolegate.yaml in current directory."""
    target = Path("rolegate.yaml")
    if target.exists() and not force:
        rprint("[yellow]rolegate.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
