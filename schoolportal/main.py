"""
School Portal — CLI Entry Point

Usage:
    python -m schoolportal.main serve [--port N]
    python -m schoolportal.main status
    python -m schoolportal.main show [--field notices]
    python -m schoolportal.main export backup.json
    python -m schoolportal.main import backup.json
    python -m schoolportal.main sync [--retry | --pull]
    python -m schoolportal.main set-field schoolName "New Name"
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import json
from typing import Any, Optional

import click
from pydantic import ValidationError

from .config.loader import PortalConfig, load_config
from .content.defaults import default_document
from .editing.records import COLLECTIONS, UnknownCollectionError, update_fields
from .logging_config import setup_logging
from .models.document import SchoolDocument, attribute_name, field_alias
from .persistence.coordinator import PersistenceCoordinator, SaveResult, SyncStatus
from .state import DocumentStore


def _config(ctx: click.Context) -> PortalConfig:
    return ctx.obj["config"]


def _store(ctx: click.Context) -> DocumentStore:
    """Bootstrapped document store for this invocation."""
    if "store" not in ctx.obj:
        store = DocumentStore(PersistenceCoordinator.from_config(_config(ctx)))
        store.bootstrap()
        ctx.obj["store"] = store
    return ctx.obj["store"]


def _echo_save(result: SaveResult) -> None:
    colors = {
        SyncStatus.SYNCED: "green",
        SyncStatus.LOCAL_ONLY: "yellow",
        SyncStatus.PENDING: "yellow",
        SyncStatus.FAILED: "red",
    }
    local = "saved" if result.local_saved else "FAILED"
    click.echo(f"Local store:  {local}")
    click.secho(f"Cloud sync:   {result.status.value}", fg=colors[result.status])
    if result.error:
        click.echo(f"Error:        {result.error}")


def _parse_value(raw: str) -> Any:
    """JSON literal if it parses (true, 12, null, [...]), else the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), help="Override the state directory")
@click.option("--offline", is_flag=True, help="Do not contact the cloud endpoint")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], offline: bool) -> None:
    """School Portal — Content site with local and cloud persistence."""
    ctx.ensure_object(dict)
    config = ctx.obj.get("config") or load_config()
    if data_dir is not None:
        config.data_dir = data_dir
    if offline:
        config.offline = True
    setup_logging(config.log_level, config.log_format)
    ctx.obj["config"] = config


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=5050, type=int, help="Port (default: 5050)")
@click.option("--open-browser", is_flag=True, help="Open a browser tab")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, open_browser: bool, debug: bool) -> None:
    """Run the site and admin API."""
    from .admin.server import run_server

    run_server(host=host, port=port, open_browser=open_browser, debug=debug, config=_config(ctx))


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the loaded document and sync state."""
    store = _store(ctx)
    doc = store.document
    coordinator = store.coordinator

    click.echo(f"School:       {doc.school_name}")
    click.echo(f"Revision:     {doc.revision}")
    click.echo(f"Loaded from:  {store.loaded_from}")
    click.echo("")
    click.echo(f"Cloud:        {'configured' if coordinator.remote else 'not configured'}")
    click.echo(f"Online:       {coordinator.is_online()}")

    pending = coordinator.pending.get_stats() if coordinator.pending else None
    if pending and pending["total_items"]:
        item = pending["items"][0]
        click.secho(
            f"Pending push: rev {item['revision']}, {item['attempt_count']} failed attempts, "
            f"next retry {item['next_retry_at']}",
            fg="yellow",
        )
    click.echo("")
    for coll in COLLECTIONS.values():
        click.echo(f"  {coll.label:<26} {len(coll.items(doc))}")


@cli.command()
@click.option("--field", "field_name", help="Only print this field (e.g. notices, schoolName)")
@click.pass_context
def show(ctx: click.Context, field_name: Optional[str]) -> None:
    """Print the document (or one field) as JSON."""
    data = _store(ctx).document.to_wire()
    if field_name:
        name = attribute_name(SchoolDocument, field_name)
        if name is None:
            raise click.ClickException(f"Unknown field: {field_name}")
        data = data.get(field_alias(SchoolDocument, name))
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@cli.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.pass_context
def export(ctx: click.Context, output: Optional[Path]) -> None:
    """Write the document as JSON to OUTPUT (default: stdout)."""
    text = json.dumps(_store(ctx).document.to_wire(), indent=2, ensure_ascii=False)
    if output is None:
        click.echo(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    click.secho(f"✅ Exported to {output}", fg="green")


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_document(ctx: click.Context, source: Path) -> None:
    """Replace the document with the JSON in SOURCE and save it."""
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
        document = SchoolDocument.from_wire(data)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{source} is not valid JSON: {e}")
    except ValidationError as e:
        raise click.ClickException(f"{source} is not a valid document ({e.error_count()} errors)")

    result = _store(ctx).commit(document)
    _echo_save(result)


@cli.command("reset-defaults")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def reset_defaults(ctx: click.Context, yes: bool) -> None:
    """Replace all content with the built-in defaults."""
    if not yes:
        click.secho("⚠️  This replaces ALL site content and credentials.", fg="yellow", bold=True)
        if not click.confirm("Continue?"):
            click.echo("Cancelled.")
            return
    result = _store(ctx).commit(default_document())
    _echo_save(result)


@cli.command()
@click.option("--retry", "mode", flag_value="retry", help="Re-push a previously failed save")
@click.option("--pull", "mode", flag_value="pull", help="Overwrite the local copy with the cloud copy")
@click.pass_context
def sync(ctx: click.Context, mode: Optional[str]) -> None:
    """Push the local document to the cloud endpoint."""
    coordinator = PersistenceCoordinator.from_config(_config(ctx))
    if not coordinator.is_online():
        raise click.ClickException("Cloud endpoint is not configured or offline mode is on")

    if mode == "pull":
        document = coordinator.pull()
        if document is None:
            raise click.ClickException("No usable document on the cloud endpoint")
        click.secho(f"✅ Pulled rev {document.revision} into the local store", fg="green")
        return

    if mode == "retry":
        result = coordinator.retry_pending(force=True)
        if result is None:
            click.echo("Nothing to retry.")
            return
    else:
        document = coordinator.load_local()
        if document is None:
            raise click.ClickException("Local store is empty; nothing to push")
        result = coordinator.save(document)

    _echo_save(result)
    if result.status is SyncStatus.FAILED:
        ctx.exit(1)


@cli.command("set-field")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_field(ctx: click.Context, key: str, value: str) -> None:
    """Set a top-level scalar field (e.g. schoolName, isAdmissionOpen)."""
    store = _store(ctx)
    parsed = _parse_value(value)
    try:
        try:
            document = update_fields(store.document, {key: parsed})
        except ValidationError:
            # "127260" parses as a number but text fields want the string
            if isinstance(parsed, str):
                raise
            document = update_fields(store.document, {key: value})
    except UnknownCollectionError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(f"Invalid value for {key} ({e.error_count()} errors)")
    _echo_save(store.commit(document))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
