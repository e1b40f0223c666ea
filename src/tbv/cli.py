"""The `tbv` command-line interface."""

import importlib.metadata
from pathlib import Path

import click

from pyvider.telemetry import logger

from .config import Settings
from .exceptions import ConfigError
from .render import ProgressPrinter, format_summary, progress_to_json
from .verification import Verifier

try:
    __version__ = importlib.metadata.version("tbv")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"


def split_package_spec(spec: str) -> tuple[str, str | None]:
    """
    Splits `name@version` into its parts. Scoped names (`@scope/name`) keep
    their leading `@`.
    """
    scoped = spec.startswith("@")
    head, sep, version = (spec[1:] if scoped else spec).rpartition("@")
    if not sep:
        return spec, None
    name = f"@{head}" if scoped else head
    if not name or name == "@":
        raise click.BadParameter(f"Invalid package spec '{spec}'.")
    return name, version or None


def _load_settings(manifest: str, **overrides) -> Settings:
    try:
        settings = Settings.from_pyproject(Path(manifest))
    except ConfigError as e:
        click.secho(f"❌ Invalid configuration:\n{e}", fg="red", err=True)
        raise click.Abort() from e
    return settings.with_overrides(**overrides)


manifest_option = click.option(
    "--manifest",
    default="pyproject.toml",
    type=click.Path(dir_okay=False),
    help="pyproject.toml holding a [tool.tbv] table.",
)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="tbv",
    message="%(prog)s version %(version)s",
)
def cli() -> None:
    """Verify that a published package matches its source repository."""
    pass


@cli.command("verify")
@click.argument("package")
@click.argument("version", required=False)
@click.option("--registry", "registry_url", help="Registry base URL.")
@click.option(
    "--command-timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds before a git or npm command is abandoned.",
)
@click.option("--keep", is_flag=True, help="Keep the checkout directory.")
@click.option("--json", "as_json", is_flag=True, help="Print the final state as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Also print steps as they start.")
@manifest_option
def verify_command(
    package: str,
    version: str | None,
    registry_url: str | None,
    command_timeout: float | None,
    keep: bool,
    as_json: bool,
    verbose: bool,
    manifest: str,
) -> None:
    """Verifies PACKAGE (optionally `name@version`) against its git source."""
    name, spec_version = split_package_spec(package)
    version_spec = version or spec_version
    settings = _load_settings(
        manifest,
        registry_url=registry_url,
        command_timeout=command_timeout,
        keep_temp=True if keep else None,
    )

    printer = None if as_json else ProgressPrinter(verbose=verbose)
    verifier = Verifier.from_settings(settings, render=printer)

    if not as_json:
        click.echo(f"🔍 Verifying {name}@{version_spec or 'latest'}...")
    verified = verifier.verify(name, version_spec)

    if as_json:
        click.echo(progress_to_json(verifier.progress, verified))
    else:
        click.echo("")
        click.echo(format_summary(verifier.progress, verified))

    if not verified:
        logger.info("Exiting with failure status", package=name)
        raise SystemExit(1)


@cli.command("config")
@manifest_option
def config_command(manifest: str) -> None:
    """Prints the effective settings."""
    settings = _load_settings(manifest)
    for key, value in settings.to_dict().items():
        click.echo(f"{key} = {value!r}")


main = cli
