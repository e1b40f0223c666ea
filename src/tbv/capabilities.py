"""
Default collaborators used by the pipeline engine: HTTP JSON fetch,
subprocess execution and temporary directory allocation.
"""

from pathlib import Path
import shutil
import subprocess
import tempfile
from typing import Any

import httpx

from pyvider.telemetry import logger

from .exceptions import IoError, NetworkError, ProcessError

DEFAULT_HTTP_TIMEOUT = 30.0
TEMP_DIR_PREFIX = "tbv_"


def http_get_json(
    url: str,
    timeout: float | None = DEFAULT_HTTP_TIMEOUT,
    client: httpx.Client | None = None,
) -> Any:
    """Performs a single GET and decodes the body as JSON."""
    logger.info(f"Fetching {url}")
    try:
        if client is not None:
            response = client.get(url, timeout=timeout)
        else:
            with httpx.Client(follow_redirects=True) as own_client:
                response = own_client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise NetworkError(f"GET {url} failed: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise NetworkError(f"GET {url} returned a body that is not valid JSON") from e


def run_command(
    command: list[str],
    cwd: Path | str | None = None,
    timeout: float | None = None,
    merge_stderr: bool = False,
) -> str:
    """
    Runs a command to completion in `cwd` and returns its standard output.

    With `merge_stderr`, standard error is appended to the returned text. npm
    writes its `npm notice` report (including the shasum line) to stderr.
    """
    logger.info(f"Running command: {' '.join(command)}", cwd=str(cwd) if cwd else None)
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise ProcessError(
            f"Command timed out after {timeout} seconds: {' '.join(command)}",
            command=command,
        ) from e
    except OSError as e:
        raise ProcessError(
            f"Command could not be started: {' '.join(command)} ({e})",
            command=command,
        ) from e

    if result.returncode != 0:
        error_message = (
            f"Command failed with exit code {result.returncode}.\n"
            f"  Command: {' '.join(command)}\n"
            f"  Stdout:\n{result.stdout.strip()}\n"
            f"  Stderr:\n{result.stderr.strip()}"
        )
        raise ProcessError(
            error_message,
            command=command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    if result.stderr:
        logger.debug("Command stderr", output=result.stderr.strip())
    if merge_stderr:
        return result.stdout + result.stderr
    return result.stdout


def make_temp_dir() -> str:
    try:
        return tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX)
    except OSError as e:
        raise IoError(f"Unable to create temporary directory: {e}") from e


def remove_temp_dir(path: str) -> None:
    shutil.rmtree(path, ignore_errors=True)
