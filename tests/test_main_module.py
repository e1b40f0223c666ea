"""Test for running tbv as a module."""

import runpy
from unittest.mock import patch


def test_main_module_entrypoint() -> None:
    """Tests that `python -m tbv` calls the CLI."""
    with patch("tbv.cli.cli") as mock_cli:
        runpy.run_module("tbv", run_name="__main__")
    mock_cli.assert_called_once()
