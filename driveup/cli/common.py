"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from driveup.core.client import GraphClient
from driveup.core.config import ENV_TOKEN, Config, get_token
from driveup.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DriveUpError,
    ProfileNotFoundError,
)
from driveup.core.logging import setup_logging
from driveup.core.output import OutputFormat, print_error

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.client: Optional[GraphClient] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False

    def get_client(self) -> GraphClient:
        """Get or create the Graph client for the selected profile.

        Raises:
            ConfigurationError: If no profile configured.
            AuthenticationError: If no access token is available.
        """
        if self.client is not None:
            return self.client

        profile = self._profile()
        token = get_token()
        if not token:
            raise AuthenticationError(reason=f"No access token. Set {ENV_TOKEN}.")

        self.client = GraphClient(
            base_url=profile.graph_url,
            access_token=token,
            timeout=profile.timeout,
        )
        return self.client

    def get_service(self, **option_overrides: Any) -> Any:
        """Build a DriveService for the selected profile.

        Args:
            **option_overrides: Upload option values overriding the profile.
        """
        from driveup.services.drive import DriveService

        profile = self._profile()
        options = profile.upload_options(**option_overrides)
        return DriveService(self.get_client(), profile.drive_id, options)

    def _profile(self) -> Any:
        if self.config is None:
            self.config = Config.load()
        try:
            profile = self.config.get_profile(self.profile_name)
        except ProfileNotFoundError as e:
            raise ConfigurationError(
                f"Profile '{self.profile_name or self.config.default_profile}' not found. "
                "Run 'driveup config init' to create one."
            ) from e
        if not profile.drive_id:
            raise ConfigurationError("Profile has no drive_id", field="drive_id")
        return profile


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="DRIVEUP_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option("--quiet", "-q", is_flag=True, help="Minimal output (IDs only)")
    @click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Report driveup errors and exit with status 1."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except DriveUpError as e:
            print_error(str(e))
            sys.exit(1)
        except FileNotFoundError as e:
            print_error(str(e))
            sys.exit(1)

    return wrapper  # type: ignore
