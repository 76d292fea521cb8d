"""CLI module for declarative ClickHouse table management.

Provides commands for connection profile management and for creating,
verifying, dropping, and importing tables declared in TOML files.

Usage:
    CH_PROFILE=local chschema connect
    chschema status
    chschema profiles
    chschema plan tables.toml
    chschema apply tables.toml --confirm
    chschema verify tables.toml
    chschema destroy tables.toml --confirm
    chschema import default.events --output events.toml

Commands:
    connect   - Check that a profile is reachable and remember it
    status    - Show current connection status
    profiles  - List available profiles
    plan      - Show the CREATE statements for declared tables
    apply     - Create declared tables
    verify    - Compare declared tables with the live database
    destroy   - Drop declared tables
    import    - Print the declaration of an existing table
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from chschema.config.loader import load_db_config
from chschema.config.models import ReconcileSettings
from chschema.errors import ChSchemaError, SchemaMismatchError
from chschema.factory import (
    ProfileNotFoundError,
    build_reconciler,
    connect,
    get_adapter,
    read_profile_lock,
)
from chschema.schema.ddl import synthesize_create, synthesize_drop
from chschema.schema.loader import dump_table_toml, load_tables
from chschema.schema.models import DesiredTable, VerifyStatus

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _load_reconcile_settings() -> ReconcileSettings | None:
    """Return ``[reconcile]`` settings, or defaults when db.toml is absent.

    Prints the error and returns None if db.toml is malformed.
    """
    try:
        return load_db_config().reconcile
    except FileNotFoundError:
        return ReconcileSettings()
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return None


def _load_declarations(path: str) -> list[DesiredTable] | None:
    """Load declarations, printing the error and returning None on failure."""
    try:
        return load_tables(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return None


def _print_sql(sql: str) -> None:
    console.print(Syntax(sql, "sql", theme="ansi_dark", word_wrap=True))


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")

    previous_profile = read_profile_lock()

    console.print("Connecting to ClickHouse...", style="dim")

    result = await connect(env_prefix=env_prefix)

    if result.success:
        console.print()
        console.print(
            f"[bold green]v[/bold green] Connected to profile: "
            f"[bold cyan]{result.profile_name}[/bold cyan]"
        )
        if previous_profile and previous_profile != result.profile_name:
            console.print(
                f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
                f"[dim]to[/dim] [bold cyan]{result.profile_name}[/bold cyan]"
            )
        return 0

    console.print()
    console.print(f"[bold red]x[/bold red] {result.error}")
    return 1


async def _async_apply(args: argparse.Namespace) -> int:
    """Async implementation for apply command.

    Creates tables in declaration order and stops at the first failure.

    Returns:
        0 on success, 1 on failure.
    """
    tables = _load_declarations(args.tables_file)
    if tables is None:
        return 1

    settings = _load_reconcile_settings()
    if settings is None:
        return 1

    if not args.confirm:
        for table in tables:
            _print_sql(synthesize_create(table.with_default_database(settings.default_database)))
            console.print()
        console.print(
            "[dim]To create these tables, add[/dim] [cyan]--confirm[/cyan] "
            "[dim]flag.[/dim]"
        )
        return 0

    try:
        adapter = await get_adapter(env_prefix=args.env_prefix)
    except (ProfileNotFoundError, KeyError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    reconciler = build_reconciler(adapter, settings)
    try:
        for table in tables:
            try:
                identity = await reconciler.create(table)
            except ChSchemaError as e:
                console.print(f"[bold red]x[/bold red] {escape(str(e))}")
                return 1
            console.print(f"[bold green]v[/bold green] Created [cyan]{identity}[/cyan]")
    finally:
        await adapter.close()

    return 0


async def _async_verify(args: argparse.Namespace) -> int:
    """Async implementation for verify command.

    Every declared table is verified; results are shown in one table.

    Returns:
        0 if all tables match or are gone, 1 on any mismatch or error.
    """
    tables = _load_declarations(args.tables_file)
    if tables is None:
        return 1

    settings = _load_reconcile_settings()
    if settings is None:
        return 1

    try:
        adapter = await get_adapter(env_prefix=args.env_prefix)
    except (ProfileNotFoundError, KeyError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    reconciler = build_reconciler(adapter, settings)

    report_table = Table(title="Table Verification", show_header=True, header_style="bold")
    report_table.add_column("Table", style="dim", no_wrap=True)
    report_table.add_column("Status", no_wrap=True)
    report_table.add_column("Detail")

    failures = 0
    try:
        for table in tables:
            identity = reconciler.resolve(table).identity
            try:
                result = await reconciler.verify(identity, table)
            except SchemaMismatchError as e:
                failures += 1
                report_table.add_row(
                    identity,
                    f"[bold red]{e.category.value.upper()} MISMATCH[/bold red]",
                    e.report.format_report(),
                )
                continue
            except ChSchemaError as e:
                failures += 1
                report_table.add_row(identity, "[bold red]ERROR[/bold red]", escape(str(e)))
                continue

            if result.status is VerifyStatus.GONE:
                report_table.add_row(
                    identity, "[bold yellow]GONE[/bold yellow]", "Table no longer exists"
                )
            else:
                report_table.add_row(
                    identity, "[bold green]VERIFIED[/bold green]", result.engine or ""
                )
    finally:
        await adapter.close()

    console.print(report_table)
    return 1 if failures else 0


async def _async_destroy(args: argparse.Namespace) -> int:
    """Async implementation for destroy command.

    Returns:
        0 on success, 1 on failure.
    """
    tables = _load_declarations(args.tables_file)
    if tables is None:
        return 1

    settings = _load_reconcile_settings()
    if settings is None:
        return 1

    if not args.confirm:
        for table in tables:
            _print_sql(synthesize_drop(table.with_default_database(settings.default_database)))
        console.print()
        console.print(
            "[dim]To drop these tables, add[/dim] [cyan]--confirm[/cyan] "
            "[dim]flag.[/dim]"
        )
        return 0

    try:
        adapter = await get_adapter(env_prefix=args.env_prefix)
    except (ProfileNotFoundError, KeyError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    reconciler = build_reconciler(adapter, settings)
    try:
        for table in tables:
            try:
                await reconciler.destroy(table)
            except ChSchemaError as e:
                console.print(f"[bold red]x[/bold red] {escape(str(e))}")
                return 1
            identity = reconciler.resolve(table).identity
            console.print(f"[bold green]v[/bold green] Dropped [cyan]{identity}[/cyan]")
    finally:
        await adapter.close()

    return 0


async def _async_import(args: argparse.Namespace) -> int:
    """Async implementation for import command.

    Returns:
        0 on success, 1 on failure.
    """
    settings = _load_reconcile_settings()
    if settings is None:
        return 1

    try:
        adapter = await get_adapter(env_prefix=args.env_prefix)
    except (ProfileNotFoundError, KeyError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    reconciler = build_reconciler(adapter, settings)
    try:
        imported = await reconciler.import_table(args.identity)
    except ChSchemaError as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1
    finally:
        await adapter.close()

    declaration = dump_table_toml(imported.table)

    if args.output:
        Path(args.output).write_text(declaration)
        console.print(
            f"[bold green]v[/bold green] Imported [cyan]{imported.identity}[/cyan] "
            f"to {args.output}"
        )
    else:
        console.print(Syntax(declaration, "toml", theme="ansi_dark"))

    return 0


# ============================================================================
# Sync command wrappers (cmd_status, cmd_profiles, cmd_plan do no I/O)
# ============================================================================


def cmd_connect(args: argparse.Namespace) -> int:
    """Check profile reachability. Wraps the async implementation."""
    return asyncio.run(_async_connect(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".ch-profile (connected)")

        try:
            config = load_db_config()
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Server", f"{p.host}:{p.port}")
                table.add_row("Database", p.database)
                if p.description:
                    table.add_row("Description", p.description)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")
        except ValueError as e:
            table.add_row("Warning", f"[yellow]Invalid db.toml: {escape(str(e))}[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print("[dim]Run:[/dim] [cyan]CH_PROFILE=<name> chschema connect[/cyan]")

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Returns:
        0 on success, 1 if db.toml is missing or invalid.
    """
    try:
        config = load_db_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Server")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        name_style = "bold cyan" if name == current else ""
        table.add_row(
            marker,
            f"[{name_style}]{name}[/{name_style}]" if name_style else name,
            f"{profile.host}:{profile.port}",
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Print the CREATE statements for declared tables (no database calls)."""
    tables = _load_declarations(args.tables_file)
    if tables is None:
        return 1

    settings = _load_reconcile_settings()
    if settings is None:
        return 1
    for table in tables:
        resolved = table.with_default_database(settings.default_database)
        console.print(f"[bold]{resolved.identity}[/bold]")
        _print_sql(synthesize_create(resolved))
        console.print()

    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    """Create declared tables. Wraps the async implementation."""
    return asyncio.run(_async_apply(args))


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify declared tables. Wraps the async implementation."""
    return asyncio.run(_async_verify(args))


def cmd_destroy(args: argparse.Namespace) -> int:
    """Drop declared tables. Wraps the async implementation."""
    return asyncio.run(_async_destroy(args))


def cmd_import(args: argparse.Namespace) -> int:
    """Import an existing table. Wraps the async implementation."""
    return asyncio.run(_async_import(args))


# ============================================================================
# Main entry point
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="chschema",
        description="Declarative ClickHouse table management",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_CH_PROFILE)"
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # connect command
    p_connect = subparsers.add_parser(
        "connect",
        help="Check that a profile is reachable and remember it",
    )
    p_connect.set_defaults(func=cmd_connect)

    # status command
    p_status = subparsers.add_parser(
        "status",
        help="Show current connection status",
    )
    p_status.set_defaults(func=cmd_status)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    # plan command
    p_plan = subparsers.add_parser(
        "plan",
        help="Show the CREATE statements for declared tables",
    )
    p_plan.add_argument("tables_file", help="Path to TOML table declarations")
    p_plan.set_defaults(func=cmd_plan)

    # apply command
    p_apply = subparsers.add_parser(
        "apply",
        help="Create declared tables",
    )
    p_apply.add_argument("tables_file", help="Path to TOML table declarations")
    p_apply.add_argument(
        "--confirm",
        action="store_true",
        help="Actually create the tables",
    )
    p_apply.set_defaults(func=cmd_apply)

    # verify command
    p_verify = subparsers.add_parser(
        "verify",
        help="Compare declared tables with the live database",
    )
    p_verify.add_argument("tables_file", help="Path to TOML table declarations")
    p_verify.set_defaults(func=cmd_verify)

    # destroy command
    p_destroy = subparsers.add_parser(
        "destroy",
        help="Drop declared tables",
    )
    p_destroy.add_argument("tables_file", help="Path to TOML table declarations")
    p_destroy.add_argument(
        "--confirm",
        action="store_true",
        help="Actually drop the tables",
    )
    p_destroy.set_defaults(func=cmd_destroy)

    # import command
    p_import = subparsers.add_parser(
        "import",
        help="Print the declaration of an existing table",
    )
    p_import.add_argument("identity", help="Table identity as database.table")
    p_import.add_argument(
        "--output",
        "-o",
        help="Write the declaration to this file instead of stdout",
    )
    p_import.set_defaults(func=cmd_import)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
