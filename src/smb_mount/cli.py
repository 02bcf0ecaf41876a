"""CLI entry point for smb_mount."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from smb_mount import __version__
from smb_mount.config import check_config_permissions, default_config_path, load_config
from smb_mount.errors import BaseDirError, ConfigError, ProbeError
from smb_mount.logging_setup import setup_logging
from smb_mount.models import BatchResult, MountEntry
from smb_mount.orchestrator import mount_many, unmount_many
from smb_mount.privilege import check_mount_tools
from smb_mount.selector import select_entries
from smb_mount.status import mount_info, refresh_all

_ALIASES = {
    "l": "list",
    "m": "mount",
    "u": "umount",
    "unmount": "umount",
}


class AliasedGroup(click.Group):
    """Click group that also accepts the short command aliases."""

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, _ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        name, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else name), cmd, args


def _get_console(ctx) -> Console:
    """Create a Rich console respecting --no-color."""
    return Console(no_color=ctx.obj.get("no_color", False))


def _load(ctx):
    """Set up logging and load the config.  Exits 1 on config errors."""
    setup_logging(verbose=ctx.obj.get("verbose", False))
    console = _get_console(ctx)
    path = ctx.obj.get("config_path")
    path = Path(path) if path else default_config_path()
    try:
        cfg = load_config(path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    for warning in check_config_permissions(path):
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    return cfg


def _find_or_exit(ctx, cfg, name) -> MountEntry:
    entry = cfg.find(name)
    if entry is None:
        console = _get_console(ctx)
        console.print(f"[red]Mount entry '{escape(name)}' not found.[/red]")
        console.print(f"Configured entries: {', '.join(cfg.names())}")
        raise SystemExit(1)
    return entry


def _print_summary(console: Console, op: str, result: BatchResult) -> None:
    console.print()
    for o in result.outcomes:
        line = f"  {o.outcome.icon} {escape(o.name)}: {o.outcome.value}"
        if o.elevated:
            line += " [dim](sudo)[/dim]"
        console.print(line)
        if o.reason:
            console.print(f"    [red]{escape(o.reason)}[/red]")
    console.print("=" * 42)
    console.print(f"{op} complete: {result.succeeded} succeeded, {result.failed} failed")
    console.print("=" * 42)


@click.group(cls=AliasedGroup)
@click.option("--config", "-c", "config_path", type=click.Path(), default=None,
              help="Path to config file (default: $XDG_CONFIG_HOME/smb_mount_config.yaml, "
                   "or ~/.config/smb_mount_config.yaml when XDG_CONFIG_HOME is unset).")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(ctx, config_path, no_color, verbose):
    """smb_mount - mount and unmount SMB/CIFS shares from a YAML config."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["no_color"] = no_color
    ctx.obj["verbose"] = verbose


@cli.command()
def version():
    """Show smb_mount version."""
    click.echo(f"smb_mount {__version__}")


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx, as_json):
    """List configured shares and their mount status."""
    cfg = _load(ctx)
    console = _get_console(ctx)
    refresh_all(cfg.mounts)

    rows = []
    for entry in cfg.mounts:
        source = ""
        if entry.is_mounted:
            try:
                info = mount_info(entry.actual_path)
            except ProbeError:
                info = None
            source = info.source if info else ""
        rows.append((entry, source))

    if as_json:
        click.echo(json.dumps([
            {
                "name": e.name,
                "address": e.unc,
                "path": e.actual_path,
                "mounted": e.is_mounted,
                "source": source,
            }
            for e, source in rows
        ], indent=2))
        return

    table = Table(title=f"SMB mounts \u2014 {cfg.base_dir}")
    table.add_column("Name", style="cyan")
    table.add_column("Address")
    table.add_column("Mount Path")
    table.add_column("Status")
    table.add_column("Source")
    for entry, source in rows:
        status = "[green]mounted[/green]" if entry.is_mounted else "[dim]not mounted[/dim]"
        table.add_row(escape(entry.name), entry.unc, entry.actual_path, status,
                      escape(source) or "[dim]-[/dim]")
    console.print(table)


@cli.command("mount")
@click.argument("name", required=False)
@click.pass_context
def mount_cmd(ctx, name):
    """Mount a share by NAME, or pick shares interactively."""
    cfg = _load(ctx)
    console = _get_console(ctx)
    refresh_all(cfg.mounts)

    if "mount.cifs" in check_mount_tools():
        console.print("[yellow]\u26a0[/yellow] mount.cifs not found \u2014 "
                      "install it with [bold]sudo apt install cifs-utils[/bold]")

    if name:
        entries = [_find_or_exit(ctx, cfg, name)]
    else:
        entries = select_entries(cfg.mounts, "mount")
        if entries is None:
            console.print("Cancelled")
            return
        if not entries:
            console.print("No shares selected")
            return

    def progress(i, total, entry):
        console.print(f"[{i}/{total}] [bold]{escape(entry.name)}[/bold]")
        console.print(f"  From: {entry.unc}")
        console.print(f"  To: {entry.actual_path}")

    def ask_password(entry):
        console.print(f"  Username: {escape(entry.username)}")
        return click.prompt("  Enter password", hide_input=True,
                            default="", show_default=False)

    console.print(f"Mounting {len(entries)} share(s)...")
    console.print()
    try:
        result = mount_many(entries, cfg.base_dir,
                            password_provider=ask_password, on_progress=progress)
    except BaseDirError as e:
        console.print(f"[red]Failed to prepare base directory:[/red] {escape(str(e))}")
        raise SystemExit(1)

    _print_summary(console, "Mount", result)
    if not result.ok:
        raise SystemExit(1)


@cli.command("umount")
@click.argument("name", required=False)
@click.option("--force", "-f", is_flag=True,
              help="Lazy unmount, falling back to a forced unmount.")
@click.option("--cleanup", is_flag=True,
              help="Remove the mount directory afterwards if it is empty.")
@click.pass_context
def umount_cmd(ctx, name, force, cleanup):
    """Unmount a share by NAME, or pick mounted shares interactively."""
    cfg = _load(ctx)
    console = _get_console(ctx)
    refresh_all(cfg.mounts)

    if name:
        entry = _find_or_exit(ctx, cfg, name)
        if not entry.is_mounted:
            console.print(f"[red]Not mounted: {escape(entry.name)}[/red]")
            raise SystemExit(1)
        entries = [entry]
    else:
        entries = select_entries(cfg.mounts, "umount")
        if entries is None:
            console.print("Cancelled")
            return
        if not entries:
            console.print("No mounted shares available")
            return

    def progress(i, total, entry):
        console.print(f"[{i}/{total}] [bold]{escape(entry.name)}[/bold]")
        console.print(f"  From: {entry.actual_path}")

    console.print(f"Unmounting {len(entries)} share(s)...")
    console.print()
    result = unmount_many(entries, cfg.base_dir, force=force, cleanup=cleanup,
                          on_progress=progress)

    _print_summary(console, "Unmount", result)
    if not result.ok:
        raise SystemExit(1)

