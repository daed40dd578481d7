"""Error and JSON output shared by the commands."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click

from vshrink.cli.exit_codes import ExitCode


def _error_payload(message: str, code_name: str) -> str:
    return json.dumps(
        {"status": "failed", "error": {"code": code_name, "message": message}}
    )


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Report ``message`` on stderr and exit with ``code``.

    In JSON mode stderr receives ``{"status": "failed", "error": {...}}``
    with the ExitCode name, so scripts can branch without parsing text.
    """
    code_name = code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"
    if json_output:
        click.echo(_error_payload(message, code_name), err=True)
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))


def echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2))
