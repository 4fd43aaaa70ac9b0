"""Main CLI entry point for driveup."""

from __future__ import annotations

import click

from driveup import __version__
from driveup.cli.config_cmd import config
from driveup.cli.files import cp, get, info, ls, mkdir, mv, rm, upload


@click.group()
@click.version_option(version=__version__, prog_name="driveup")
def cli() -> None:
    """driveup - upload files to OneDrive and SharePoint drives.

    Get started:

      driveup config init --drive-id <ID>   # Create config file

      export DRIVEUP_TOKEN=...              # Graph access token

      driveup upload ./big.iso isos/big.iso # Chunked upload

    Use --help on any command for more information.
    """
    pass


cli.add_command(config)
cli.add_command(upload)
cli.add_command(info)
cli.add_command(ls)
cli.add_command(mkdir)
cli.add_command(rm)
cli.add_command(get)
cli.add_command(mv)
cli.add_command(cp)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
