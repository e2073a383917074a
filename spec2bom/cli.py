#!/usr/bin/env python3
"""CLI commands for the Spec-to-BOM client."""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from spec2bom.client.models import FileUpload
from spec2bom.client.store import ObjectStoreClient
from spec2bom.core.config import Settings
from spec2bom.core.logging import configure_logging
from spec2bom.ui.controller import SpecToBomApp
from spec2bom.ui.notifications import Level, Notification
from spec2bom.ui.render import ListView

T = TypeVar("T")


def _echo_notification(notification: Notification) -> None:
    if notification.level is Level.ERROR:
        click.secho(f"✖ {notification.message}", fg="red", err=True)
    else:
        click.secho(f"✔ {notification.message}", fg="green")


def _echo_view(title: str, view: ListView) -> None:
    click.echo(f"{title}:")
    if view.is_empty:
        click.echo(f"  {view.empty_message}")
        return
    for row in view.rows:
        meta = f"  {row.meta}" if row.meta else ""
        click.echo(f"  [{row.badge}] {row.name}{meta}  ({row.id})")


def _run(
    ctx: click.Context, action: Callable[[SpecToBomApp], Awaitable[T]]
) -> T:
    """Build the controller against the proxy and run one async action."""
    settings: Settings = ctx.obj["settings"]

    async def runner() -> T:
        async with ObjectStoreClient(settings.SPEC2BOM_PROXY_URL) as store:
            app = SpecToBomApp(store, settings=settings)
            app.notifier.subscribe(_echo_notification)
            try:
                return await action(app)
            finally:
                await app.close()

    return asyncio.run(runner())


def _read_files(paths: tuple[str, ...]) -> list[FileUpload]:
    return [FileUpload.from_path(path) for path in paths]


@click.group()
@click.option("--proxy-url", default=None, help="Base URL of the Spec-to-BOM proxy")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def cli(ctx: click.Context, proxy_url: str | None, verbose: bool) -> None:
    """Upload specs, generate BOMs and manage the catalogue."""
    overrides: dict[str, Any] = {}
    if proxy_url:
        overrides["SPEC2BOM_PROXY_URL"] = proxy_url
    settings = Settings(**overrides)
    configure_logging(
        level="debug" if verbose else "warning", json_logs=settings.JSON_LOGS
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
def serve(host: str, port: int) -> None:
    """Run the credential-holding proxy service."""
    import uvicorn

    click.echo(f"Starting Spec-to-BOM proxy on http://{host}:{port}")
    uvicorn.run("spec2bom.main:app", host=host, port=port)


@cli.command()
@click.pass_context
def catalogue(ctx: click.Context) -> None:
    """List catalogue items."""

    async def action(app: SpecToBomApp) -> None:
        await app.load_catalogue()
        _echo_view("Catalogue", app.view().catalogue)

    _run(ctx, action)


@cli.command()
@click.pass_context
def boms(ctx: click.Context) -> None:
    """List generated BOMs, newest first."""

    async def action(app: SpecToBomApp) -> None:
        await app.load_boms()
        _echo_view("Generated BOMs", app.view().boms)

    _run(ctx, action)


@cli.command("upload-catalog")
@click.argument(
    "files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False)
)
@click.pass_context
def upload_catalog(ctx: click.Context, files: tuple[str, ...]) -> None:
    """Upload reference files to the catalogue."""
    uploads = _read_files(files)

    async def action(app: SpecToBomApp) -> None:
        await app.upload_catalog_files(uploads)
        _echo_view("Catalogue", app.view().catalogue)

    _run(ctx, action)


@cli.command()
@click.argument(
    "files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False)
)
@click.option(
    "--watch/--no-watch",
    default=True,
    help="Keep polling until the generated BOMs appear",
)
@click.pass_context
def generate(ctx: click.Context, files: tuple[str, ...], watch: bool) -> None:
    """Upload spec files and start BOM generation for each."""
    uploads = _read_files(files)

    async def action(app: SpecToBomApp) -> list[str]:
        await app.load_initial_data()
        app.select_specs(uploads)
        job_ids = await app.start_generation()
        _echo_view("Queue", app.view().queue)
        if watch and job_ids:
            click.echo("Waiting for results (Ctrl+C to stop)...")
            await app.reconciler.wait()
            _echo_view("Queue", app.view().queue)
            _echo_view("Generated BOMs", app.view().boms)
        return job_ids

    if not _run(ctx, action):
        ctx.exit(1)


@cli.command()
@click.argument("object_id")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the content to this file instead of printing its URL",
)
@click.pass_context
def download(ctx: click.Context, object_id: str, output: Path | None) -> None:
    """Print a download URL for an object, or save its content."""

    async def action(app: SpecToBomApp) -> str | None:
        return await app.download_item(object_id, output)

    result = _run(ctx, action)
    if result is None:
        ctx.exit(1)
    click.echo(result)


@cli.command()
@click.argument("object_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, object_id: str, yes: bool) -> None:
    """Delete a catalogue item or BOM."""
    declined = False

    def confirm() -> bool:
        nonlocal declined
        declined = not (yes or click.confirm("Are you sure you want to delete this item?"))
        return not declined

    async def action(app: SpecToBomApp) -> bool:
        return await app.delete_item(object_id, confirm=confirm)

    if not _run(ctx, action) and not declined:
        ctx.exit(1)


if __name__ == "__main__":
    cli()
