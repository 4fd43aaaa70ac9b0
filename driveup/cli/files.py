"""File and folder commands for driveup."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from driveup.cli.common import Context, global_options, handle_errors
from driveup.core.output import (
    create_transfer_progress,
    print_output,
    print_success,
)
from driveup.models.drive_item import DriveItem
from driveup.models.progress import UploadPhase, UploadProgress

ITEM_COLUMN_LABELS = {
    "name": "Name",
    "type": "Type",
    "size_display": "Size",
    "last_modified": "Modified",
    "id": "ID",
}


def _item_summary(item: DriveItem) -> dict[str, object]:
    return {
        "id": item.id,
        "name": item.name,
        "size": item.size,
        "last_modified": item.last_modified_date_time,
        "web_url": item.web_url,
    }


@click.command("upload")
@click.argument("local_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("remote_path")
@click.option(
    "--chunk-size",
    type=int,
    default=None,
    help="Chunk size in bytes (multiple of 327680)",
)
@click.option(
    "--request-timeout",
    type=float,
    default=None,
    help="Timeout in seconds for each chunk request",
)
@global_options
@handle_errors
def upload(
    ctx: Context,
    local_path: Path,
    remote_path: str,
    chunk_size: Optional[int],
    request_timeout: Optional[float],
) -> None:
    """Upload a local file to the drive.

    Parent folders are created as needed. Files over 4 MiB are sent in
    chunks through an upload session.

    Example:
        driveup upload ./backup.tar reports/2026/backup.tar
    """
    service = ctx.get_service(chunk_size=chunk_size, request_timeout=request_timeout)

    if ctx.quiet:
        item = service.upload_file(local_path, remote_path)
    else:
        with create_transfer_progress() as progress:
            task = progress.add_task(
                f"Uploading {local_path.name}", total=local_path.stat().st_size
            )

            def on_progress(update: UploadProgress) -> None:
                if update.phase in (UploadPhase.TRANSMITTING, UploadPhase.COMPLETE):
                    progress.update(task, completed=update.bytes_sent)

            item = service.upload_file(local_path, remote_path, on_progress)
            progress.update(task, completed=local_path.stat().st_size)

    if ctx.quiet:
        print_output(_item_summary(item), quiet=True)
        return
    print_success(f"Uploaded {local_path.name} to {remote_path}")
    print_output(_item_summary(item), format=ctx.output_format)


@click.command("info")
@click.argument("remote_path")
@global_options
@handle_errors
def info(ctx: Context, remote_path: str) -> None:
    """Show metadata for a drive item."""
    service = ctx.get_service()
    item = service.get_item(remote_path)
    data = _item_summary(item)
    data["type"] = "folder" if item.is_folder else "file"
    data["mime_type"] = item.mime_type
    print_output(data, format=ctx.output_format, quiet=ctx.quiet)


@click.command("ls")
@click.argument("directory", default="")
@click.option("--recursive", "-r", is_flag=True, help="Include the contents of nested folders")
@global_options
@handle_errors
def ls(ctx: Context, directory: str, recursive: bool) -> None:
    """List the items in a drive folder (the root by default)."""
    service = ctx.get_service()
    items = service.list_children(directory, deep=recursive)
    rows = [item.to_row() for item in items]
    print_output(
        rows,
        format=ctx.output_format,
        columns=DriveItem.table_columns(),
        column_labels=ITEM_COLUMN_LABELS,
        quiet=ctx.quiet,
    )


@click.command("mkdir")
@click.argument("remote_path")
@global_options
@handle_errors
def mkdir(ctx: Context, remote_path: str) -> None:
    """Create a folder and any missing parents."""
    service = ctx.get_service()
    service.ensure_directory(remote_path)
    if not ctx.quiet:
        print_success(f"Folder ready: {remote_path}")


@click.command("rm")
@click.argument("remote_path")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@global_options
@handle_errors
def rm(ctx: Context, remote_path: str, yes: bool) -> None:
    """Delete a file or folder."""
    if not yes:
        click.confirm(f"Delete {remote_path}?", abort=True)
    service = ctx.get_service()
    service.delete(remote_path)
    if not ctx.quiet:
        print_success(f"Deleted {remote_path}")


@click.command("get")
@click.argument("remote_path")
@click.argument("local_path", type=click.Path(dir_okay=False, path_type=Path), required=False)
@global_options
@handle_errors
def get(ctx: Context, remote_path: str, local_path: Optional[Path]) -> None:
    """Download a drive file.

    LOCAL_PATH defaults to the file name in the current directory.

    Example:
        driveup get reports/2026/backup.tar ./backup.tar
    """
    target = local_path or Path(remote_path.rstrip("/").rsplit("/", 1)[-1])
    service = ctx.get_service()
    written = service.download_file(remote_path, target)
    if not ctx.quiet:
        print_success(f"Downloaded {remote_path} to {target} ({written} bytes)")


@click.command("mv")
@click.argument("source")
@click.argument("destination")
@global_options
@handle_errors
def mv(ctx: Context, source: str, destination: str) -> None:
    """Move or rename a drive item."""
    service = ctx.get_service()
    item = service.move(source, destination)
    if ctx.quiet:
        print_output(_item_summary(item), quiet=True)
        return
    print_success(f"Moved {source} to {destination}")


@click.command("cp")
@click.argument("source")
@click.argument("destination")
@global_options
@handle_errors
def cp(ctx: Context, source: str, destination: str) -> None:
    """Copy a drive item; the copy completes on the server."""
    service = ctx.get_service()
    monitor_url = service.copy(source, destination)
    if ctx.quiet:
        if monitor_url:
            click.echo(monitor_url)
        return
    print_success(f"Copy of {source} to {destination} started")
