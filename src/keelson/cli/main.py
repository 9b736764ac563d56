import shutil
from functools import partial
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import click
import typer
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from keelson import __version__
from keelson.cli.formatter import OutputFormatter
from keelson.core.context import KeelsonContext
from keelson.shell import (
    KeelsonShell,
    build_command_namespace,
    build_command_registry,
    filter_commands,
    resolve_history_path,
)
from keelson.site.bootstrap import boot, build_session_context, terminate
from keelson.utils.errors import KeelsonError

app = typer.Typer(name="keelson", help="Keelson site management CLI", rich_markup_mode=None, no_args_is_help=True)

# Canonical command name -> alternate names it is also registered under
COMMAND_ALIASES: Dict[str, Tuple[str, ...]] = {}

SHELL_CACHE_BIN = "shell"


def command(name: str, *, aliases: Sequence[str] = (), **kwargs: Any) -> Callable:
    """Register a command on the app under ``name`` plus hidden alias entries."""
    def decorator(func: Callable) -> Callable:
        app.command(name, **kwargs)(func)
        for alias in aliases:
            app.command(alias, **{**kwargs, "hidden": True})(func)
        COMMAND_ALIASES[name] = tuple(aliases)
        return func

    return decorator


def _context(ctx: typer.Context) -> KeelsonContext:
    return ctx.ensure_object(KeelsonContext)


@app.callback()
def main(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Site root, or any directory inside it."),
    alias: Optional[str] = typer.Option(None, "--alias", "-a", help="Target a site alias, e.g. @prod."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output."),
):
    """
    Keelson site management CLI.
    """
    # Commands run from inside the shell reuse the shell's context
    if isinstance(ctx.obj, KeelsonContext):
        return

    try:
        ctx.obj = boot(root=root, alias=alias, verbose=verbose)
    except KeelsonError as exc:
        OutputFormatter.log(str(exc), severity="error")
        raise typer.Exit(code=1)


@command("status", aliases=("st",))
def status(ctx: typer.Context):
    """
    Show the targeted site and Keelson environment.
    """
    context = _context(ctx)
    site = context.site
    OutputFormatter.print_data({
        "site": site.name if site else None,
        "root": str(site.path) if site else None,
        "framework": context.tool_name,
        "version": site.version if site else None,
        "alias": context.active_alias,
        "config_file": str(context.config_path) if context.config_path else None,
        "databases": sorted(context.databases),
        "cache_dir": str(context.settings.cache_dir),
    })


@command("site-aliases", aliases=("sa",))
def site_aliases(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Show a single alias, e.g. @prod."),
):
    """
    List the configured site aliases.
    """
    context = _context(ctx)
    if name:
        try:
            OutputFormatter.print_data(context.aliases.resolve(name))
        except KeelsonError as exc:
            OutputFormatter.log(str(exc), severity="error")
            raise typer.Exit(code=1)
        return

    if not len(context.aliases):
        OutputFormatter.log("No site aliases configured.", severity="info")
        return

    OutputFormatter.print_aliases(context.aliases)


@command("config-get", aliases=("cget",))
def config_get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Dotted key in the 'config' section, e.g. mail.sender."),
):
    """
    Print a value from the site configuration.
    """
    context = _context(ctx)
    try:
        value = context.get_config_value(key)
    except KeyError:
        OutputFormatter.log(f"Config key '{key}' not found.", severity="error")
        raise typer.Exit(code=1)
    OutputFormatter.print_data(value)


@command("sql-query", aliases=("sqlq",))
def sql_query(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="SQL statement to run."),
    database: str = typer.Option("default", "--database", "-d", help="Connection name from the 'databases' section."),
):
    """
    Run a SQL statement against a site database.
    """
    context = _context(ctx)
    engine = context.databases.get(database)
    if engine is None:
        available = sorted(context.databases)
        OutputFormatter.log(f"Database connection '{database}' not found. Available: {available}", severity="error")
        raise typer.Exit(code=1)

    try:
        with engine.connect() as conn:
            result = conn.execute(text(query))
            if result.returns_rows:
                rows = [dict(row) for row in result.mappings()]
            else:
                conn.commit()
                rows = {"rows_affected": result.rowcount}
    except SQLAlchemyError as exc:
        OutputFormatter.log(f"Query failed: {exc}", severity="error")
        raise typer.Exit(code=1)

    OutputFormatter.print_data(rows)


@command("cache-clear", aliases=("cc",))
def cache_clear(
    ctx: typer.Context,
    cache_bin: Optional[str] = typer.Argument(None, metavar="BIN", help="Cache bin to clear, e.g. 'shell'. All bins when omitted."),
):
    """
    Delete cached files.
    """
    context = _context(ctx)
    cache_dir = context.settings.cache_dir

    if cache_bin:
        if Path(cache_bin).name != cache_bin:
            OutputFormatter.log(f"Invalid cache bin '{cache_bin}'.", severity="error")
            raise typer.Exit(code=1)
        targets = [cache_dir / cache_bin]
    else:
        targets = list(cache_dir.iterdir()) if cache_dir.is_dir() else []

    for target in targets:
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()

    label = f"'{cache_bin}' cache" if cache_bin else "all caches"
    OutputFormatter.log(f"Cleared {label}.", severity="success")


@command("eval", aliases=("ev",))
def evaluate(
    ctx: typer.Context,
    expression: str = typer.Argument(..., help="Python expression; 'site' holds the site context."),
):
    """
    Evaluate a Python expression against the site.
    """
    context = _context(ctx)
    try:
        result = eval(expression, {"site": context})
    except Exception as exc:
        OutputFormatter.log(f"Evaluation failed: {exc}", severity="error")
        raise typer.Exit(code=1)
    OutputFormatter.print_data(result)


@app.command()
def version():
    """
    Print the Keelson version.
    """
    typer.echo(f"keelson {__version__}")


@app.command("docs-shell", hidden=True)
def docs_shell():
    """
    Keelson's Python shell.
    """
    typer.echo(resources.files("keelson").joinpath("docs").joinpath("shell.md").read_text(encoding="utf-8"))


def _invoke_in_shell(group: click.Group, context: KeelsonContext, name: str, argv: List[str]) -> Any:
    """Run one host command from inside the shell against the shell's context."""
    try:
        return group.main(args=[name, *argv], prog_name="keelson", standalone_mode=False, obj=context)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        OutputFormatter.log("Aborted.", severity="warning")
        return 1


def _banner(context: KeelsonContext) -> str:
    site = context.site
    target = f"{site.name} ({site.framework} {site.version})" if site else "no site"
    return f"Keelson shell on {target}. Type 'help' for commands, Ctrl-D to exit."


@command("shell", aliases=("repl",))
def shell(
    ctx: typer.Context,
    version_history: bool = typer.Option(
        False,
        "--version-history",
        help="Use command history based on the site version (default is per site).",
    ),
):
    """
    Open an interactive Python shell on the site.
    """
    context = _context(ctx)

    try:
        session = build_session_context(context, use_version_history=version_history)
        history_path = resolve_history_path(
            context.settings.cache_dir / SHELL_CACHE_BIN,
            session,
            aliases=context.aliases,
            tool_name=context.tool_name,
            verbose=context.settings.verbose,
        )
        console = KeelsonShell(history_path, scope={"site": context})

        group = typer.main.get_command(app)
        registry = build_command_registry(group, COMMAND_ALIASES)
        namespace = build_command_namespace(
            filter_commands(registry),
            invoke=partial(_invoke_in_shell, group, context),
        )
    except KeelsonError as exc:
        OutputFormatter.log(str(exc), severity="error")
        raise typer.Exit(code=1)

    console.add_commands(namespace)

    # Release site resources before the console owns the terminal
    terminate(context)

    console.run(banner=_banner(context))
    raise typer.Exit(code=0)


if __name__ == "__main__":
    app()
