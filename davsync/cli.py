"""CLI interface for davsync."""

import asyncio
import logging
from typing import Any, Optional

import click

from .api import WebDAVClient
from .cli_progress import SyncStatusDisplay
from .config import config
from .exceptions import DavSyncError
from .output import OutputFormatter
from .sync import (
    PairStore,
    SyncConfigError,
    SyncMode,
    SyncPair,
    iter_sync_events,
    load_sync_pairs_from_json,
)

logger = logging.getLogger(__name__)


@click.group()
@click.option("--host", "-H", envvar="DAVSYNC_HOST", help="WebDAV endpoint URL")
@click.option("--login", "-l", envvar="DAVSYNC_LOGIN", help="WebDAV login")
@click.option("--password", "-p", envvar="DAVSYNC_PASSWORD", help="WebDAV password")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="davsync")
@click.pass_context
def main(
    ctx: Any,
    host: Optional[str],
    login: Optional[str],
    password: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """davsync - Keep local files in sync with a WebDAV server."""
    ctx.ensure_object(dict)
    ctx.obj["host"] = host
    ctx.obj["login"] = login
    ctx.obj["password"] = password
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("davsync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


async def _probe(host: str, login: str, password: str) -> bool:
    async with WebDAVClient(host=host, login=login, password=password) as client:
        return await client.probe()


@main.command()
@click.option("--host", "-H", prompt="WebDAV endpoint URL", help="WebDAV endpoint URL")
@click.option("--login", "-l", prompt="Login", help="WebDAV login")
@click.option(
    "--password",
    "-p",
    prompt="Password",
    hide_input=True,
    help="WebDAV password",
)
@click.pass_context
def init(ctx: Any, host: str, login: str, password: str) -> None:
    """Store the WebDAV endpoint and credentials.

    The connection is checked before saving to ~/.config/davsync/config.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        out.info("Checking connection...")
        if asyncio.run(_probe(host, login, password)):
            out.success("✓ Connection successful")
        else:
            out.error("Can't open connection")
            if not click.confirm("Save credentials anyway?", default=False):
                out.warning("Configuration cancelled.")
                ctx.exit(1)

        config.save_credentials(host, login, password)
        out.print_summary(
            "Initialization Complete",
            [
                ("Status", "✓ Configuration saved successfully"),
                ("Config file", str(config.get_config_path())),
            ],
        )
    except DavSyncError as e:
        out.error(f"Initialization failed: {e}")
        ctx.exit(1)


@main.group()
def pair() -> None:
    """Manage sync pairs."""


@pair.command("add")
@click.argument("local_path")
@click.argument("remote_path")
@click.pass_context
def pair_add(ctx: Any, local_path: str, remote_path: str) -> None:
    """Add a pair keeping LOCAL_PATH in sync with REMOTE_PATH."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        new_pair = PairStore().add(local_path, remote_path)
    except SyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(new_pair.to_dict())
    else:
        out.success(f"✓ Added pair {new_pair}")


@pair.command("edit")
@click.argument("old_local_path")
@click.argument("local_path")
@click.argument("remote_path")
@click.pass_context
def pair_edit(ctx: Any, old_local_path: str, local_path: str, remote_path: str) -> None:
    """Replace the pair for OLD_LOCAL_PATH with LOCAL_PATH and REMOTE_PATH."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        new_pair = PairStore().edit(old_local_path, local_path, remote_path)
    except SyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(new_pair.to_dict())
    else:
        out.success(f"✓ Updated pair {new_pair}")


@pair.command("list")
@click.pass_context
def pair_list(ctx: Any) -> None:
    """List all sync pairs."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        pairs = PairStore().list()
    except SyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if not pairs and not out.json_output:
        out.info("No sync pairs defined. Use 'davsync pair add' to create one.")
        return

    out.output_table(
        [p.to_dict() for p in pairs],
        ["local", "remote"],
        {"local": "Local path", "remote": "Remote path"},
    )


@pair.command("remove")
@click.argument("local_path")
@click.pass_context
def pair_remove(ctx: Any, local_path: str) -> None:
    """Remove the pair for LOCAL_PATH."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        removed = PairStore().delete(local_path)
    except SyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if not removed:
        out.error(f"No pair for {local_path}")
        ctx.exit(1)
        return
    out.success(f"✓ Removed pair for {local_path}")


def _load_pairs(pairs_file: Optional[str]) -> list[SyncPair]:
    if pairs_file:
        return load_sync_pairs_from_json(pairs_file)
    return PairStore().list()


def _run_mode(ctx: Any, mode: SyncMode, pairs_file: Optional[str]) -> None:
    """Run the engine in the given mode and render its events."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        pairs = _load_pairs(pairs_file)
    except SyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if not pairs:
        out.warning("No sync pairs defined. Use 'davsync pair add' to create one.")
        return

    display = SyncStatusDisplay(out, mode, len(pairs))

    async def consume() -> None:
        async for event in iter_sync_events(
            ctx.obj["host"],
            ctx.obj["login"],
            ctx.obj["password"],
            mode,
            pairs,
        ):
            display.handle(event)

    with display:
        asyncio.run(consume())

    if out.json_output:
        out.output_json(
            {
                "mode": mode.value,
                "pairs": [
                    {
                        "local": p.local_path,
                        "remote": p.remote_path,
                        "outcome": display.outcomes[i].outcome.value
                        if i < len(display.outcomes)
                        else None,
                    }
                    for i, p in enumerate(pairs)
                ],
                "diagnostics": display.diagnostics,
            }
        )
    else:
        out.print_summary(
            "Sync Summary" if mode.performs_transfers else "Check Summary",
            [(name, str(count)) for name, count in display.counts().items()],
        )

    # Pairs without an outcome mean the run aborted before processing them
    if len(display.outcomes) < len(pairs):
        ctx.exit(1)


@main.command()
@click.option(
    "--pairs-file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with pairs to use instead of the stored ones",
)
@click.pass_context
def check(ctx: Any, pairs_file: Optional[str]) -> None:
    """Report how each pair differs without transferring anything.

    Examples:
        davsync check
        davsync check -f pairs.json
    """
    _run_mode(ctx, SyncMode.REPORT_ONLY, pairs_file)


@main.command()
@click.option(
    "--pairs-file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with pairs to use instead of the stored ones",
)
@click.pass_context
def sync(ctx: Any, pairs_file: Optional[str]) -> None:
    """Synchronize every pair, uploading or downloading the newer side.

    Examples:
        davsync sync
        davsync --json sync -f pairs.json
    """
    _run_mode(ctx, SyncMode.MUTATE, pairs_file)


if __name__ == "__main__":
    main()
