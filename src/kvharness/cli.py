# src/kvharness/cli.py
"""kvharness Command Line Interface.

Inspect the resolved harness configuration, manage recordings, and sweep a
real vault clean before a live or record run.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from pydantic import ValidationError

from kvharness import __version__
from kvharness.contracts.enums import TestMode, VaultObjectKind
from kvharness.contracts.errors import HarnessConfigurationError, RecordingIntegrityError, RecordingNotFoundError
from kvharness.core.config import get_env, load_settings
from kvharness.harness.cleanup import (
    clean_up_certificate_vault,
    clean_up_key_vault,
    remove_all_certificates_from_vault,
    remove_all_keys_from_vault,
)
from kvharness.harness.factories import CertificateClientFactory, KeyClientFactory
from kvharness.harness.session import KeyVaultTestSession
from kvharness.recording.store import RecordingStore

if TYPE_CHECKING:
    from kvharness.core.config import HarnessSettings
    from kvharness.harness.factories import ClientFactory

__all__ = ["app"]

app = typer.Typer(
    name="kvharness",
    help="kvharness: record/playback harness for Key Vault SDK tests.",
    no_args_is_help=True,
)

recordings_app = typer.Typer(help="Inspect and delete recordings.", no_args_is_help=True)
sweep_app = typer.Typer(help="Delete and purge objects in the configured vault.", no_args_is_help=True)
app.add_typer(recordings_app, name="recordings")
app.add_typer(sweep_app, name="sweep")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"kvharness version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


def _fail(message: str) -> typer.Exit:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _settings_or_exit() -> HarnessSettings:
    try:
        return load_settings()
    except HarnessConfigurationError as e:
        raise _fail(str(e)) from None
    except ValidationError as e:
        raise _fail(f"invalid configuration:\n{e}") from None


def _recording_store(recording_dir: Path | None) -> RecordingStore:
    # Listing recordings needs no credentials, so only the directory is resolved
    base = recording_dir or Path(get_env("AZURE_TEST_RECORDING_DIR", str(Path.cwd())))
    return RecordingStore(base / "recordings")


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Log level: DEBUG, INFO, WARNING or ERROR.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """kvharness: record/playback harness for Key Vault SDK tests."""
    from kvharness.core.logging import configure_logging

    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


@app.command()
def mode() -> None:
    """Show the resolved test mode and settings (secret masked)."""
    settings = _settings_or_exit()
    typer.echo(f"mode:            {settings.mode.value}")
    typer.echo(f"vault_url:       {settings.vault_url}")
    typer.echo(f"hsm_url:         {settings.hsm_url or '-'}")
    typer.echo(f"tenant_id:       {settings.tenant_id}")
    typer.echo(f"client_id:       {settings.client_id}")
    typer.echo("client_secret:   ***")
    typer.echo(f"recordings:      {settings.recordings_path}")
    typer.echo(f"avoid_throttled: {settings.avoid_throttled}")


RecordingDirOption = typer.Option(
    None,
    "--recording-dir",
    "-d",
    help="Directory holding recordings/ (default: AZURE_TEST_RECORDING_DIR or the current directory).",
)


@recordings_app.command("list")
def recordings_list(recording_dir: Path | None = RecordingDirOption) -> None:
    """List recorded tests."""
    store = _recording_store(recording_dir)
    names = store.list_names()
    if not names:
        typer.echo(f"No recordings in {store.root}")
        return
    for name in names:
        typer.echo(name)


@recordings_app.command("show")
def recordings_show(
    test_name: str = typer.Argument(..., help="Recorded test name."),
    recording_dir: Path | None = RecordingDirOption,
    as_json: bool = typer.Option(False, "--json", help="Print the recording file as JSON."),
) -> None:
    """Show the interactions recorded for one test."""
    store = _recording_store(recording_dir)
    try:
        recording = store.load(test_name)
    except (RecordingNotFoundError, RecordingIntegrityError) as e:
        raise _fail(str(e)) from None

    if as_json:
        typer.echo(json.dumps(recording.to_dict(), indent=2))
        return

    typer.echo(f"test:         {recording.test_name}")
    typer.echo(f"variables:    {len(recording.variables)}")
    typer.echo(f"interactions: {len(recording.interactions)}")
    for index, interaction in enumerate(recording.interactions):
        typer.echo(f"  {index:3d}  {interaction.response.status_code}  {interaction.signature}")


@recordings_app.command("delete")
def recordings_delete(
    test_name: str = typer.Argument(..., help="Recorded test name."),
    recording_dir: Path | None = RecordingDirOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking."),
) -> None:
    """Delete one test's recording."""
    store = _recording_store(recording_dir)
    if not store.exists(test_name):
        raise _fail(f"no recording for '{test_name}' in {store.root}")
    if not yes and not typer.confirm(f"Delete recording '{test_name}'?"):
        raise typer.Exit(1)
    store.delete(test_name)
    typer.echo(f"Deleted {store.path_for(test_name)}")


def _run_sweep(
    kind: VaultObjectKind,
    factory: ClientFactory[Any],
    remove_all: Callable[..., list[str]],
    purge_deleted: Callable[..., list[str]],
    *,
    deleted_only: bool,
    no_wait: bool,
    yes: bool,
) -> None:
    settings = _settings_or_exit()
    if settings.is_playback:
        raise _fail("sweep needs a real vault; set AZURE_TEST_MODE=live or record")
    # Sweeps are never recorded
    settings = settings.model_copy(update={"mode": TestMode.LIVE})

    action = "Purge deleted" if deleted_only else "Delete and purge all"
    if not yes and not typer.confirm(f"{action} {kind.value} in {settings.vault_url}?"):
        raise typer.Exit(1)

    session: KeyVaultTestSession[Any] = KeyVaultTestSession(settings, factory)
    try:
        client = session.initialize_client()
        purge_wait = 0.0 if no_wait else session.purge_wait
        if deleted_only:
            names = purge_deleted(client, purge_wait=purge_wait)
        else:
            names = remove_all(client, polling_interval=session.default_wait, wait_for_purge=not no_wait, purge_wait=purge_wait)
    finally:
        session.close()

    typer.secho(f"Purged {len(names)} {kind.value}", fg=typer.colors.GREEN)
    for name in names:
        typer.echo(f"  {name}")


DeletedOnlyOption = typer.Option(False, "--deleted-only", help="Only purge objects that are already soft-deleted.")
NoWaitOption = typer.Option(False, "--no-wait", help="Skip the purge propagation sleep.")
YesOption = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation.")


@sweep_app.command("keys")
def sweep_keys(deleted_only: bool = DeletedOnlyOption, no_wait: bool = NoWaitOption, yes: bool = YesOption) -> None:
    """Delete and purge every key in the configured vault."""
    _run_sweep(
        VaultObjectKind.KEYS,
        KeyClientFactory(),
        remove_all_keys_from_vault,
        clean_up_key_vault,
        deleted_only=deleted_only,
        no_wait=no_wait,
        yes=yes,
    )


@sweep_app.command("certificates")
def sweep_certificates(deleted_only: bool = DeletedOnlyOption, no_wait: bool = NoWaitOption, yes: bool = YesOption) -> None:
    """Delete and purge every certificate in the configured vault."""
    _run_sweep(
        VaultObjectKind.CERTIFICATES,
        CertificateClientFactory(),
        remove_all_certificates_from_vault,
        clean_up_certificate_vault,
        deleted_only=deleted_only,
        no_wait=no_wait,
        yes=yes,
    )


if __name__ == "__main__":
    app()
