"""Config commands for driveup."""

from __future__ import annotations

from typing import Optional

import click

from driveup.core.config import CONFIG_FILE, DEFAULT_GRAPH_URL, Config, Profile
from driveup.core.exceptions import DriveUpError
from driveup.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from driveup.core.validation import validate_chunk_size, validate_server_url


@click.group()
def config() -> None:
    """Manage driveup configuration."""
    pass


@config.command("init")
@click.option("--drive-id", prompt="Drive ID", help="Graph drive ID")
@click.option("--profile", default="default", help="Profile name")
@click.option("--graph-url", default=DEFAULT_GRAPH_URL, help="Graph API base URL")
@click.option("--chunk-size", type=int, default=None, help="Default chunk size in bytes")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def config_init(
    drive_id: str,
    profile: str,
    graph_url: str,
    chunk_size: Optional[int],
    force: bool,
) -> None:
    """Create or extend the configuration file with a profile.

    The access token is never stored; export DRIVEUP_TOKEN instead.

    Example:
        driveup config init --drive-id b!abc123
    """
    try:
        graph_url = validate_server_url(graph_url)
        if chunk_size is not None:
            validate_chunk_size(chunk_size)
        cfg = Config.load(CONFIG_FILE) if CONFIG_FILE.exists() else Config()
    except DriveUpError as e:
        print_error(str(e))
        raise SystemExit(1)

    if cfg.has_profile(profile) and not force:
        print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
        raise SystemExit(1)

    cfg.profiles[profile] = Profile(drive_id=drive_id, graph_url=graph_url, chunk_size=chunk_size)
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save(CONFIG_FILE)

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value({"profile": profile, "drive_id": drive_id, "graph_url": graph_url})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    try:
        cfg = Config.load()
    except DriveUpError as e:
        print_error(str(e))
        raise SystemExit(1)

    if not cfg.profiles:
        print_error("No configuration found. Run 'driveup config init' first.")
        raise SystemExit(1)

    if output == "json":
        print_output(
            {
                "config_file": str(CONFIG_FILE),
                "default_profile": cfg.default_profile,
                "profiles": {name: p.to_dict() for name, p in cfg.profiles.items()},
            },
            format=OutputFormat.JSON,
        )
        return

    print_key_value(
        {"config_file": str(CONFIG_FILE), "default_profile": cfg.default_profile},
        title="Configuration",
    )
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo()
        click.echo(f"Profile: {name}{marker}")
        print_key_value(profile.to_dict())
