"""Running the watched command."""

from __future__ import annotations

import asyncio
import os
import shutil
import sys
from collections.abc import Sequence

Shell = tuple[str, Sequence[str]]


def _is_pwsh(shell: Shell | None) -> bool:
    return shell is not None and shell[0] == "pwsh"


def prepare_command(command: Sequence[str], shell: Shell | None) -> tuple[str, list[str]]:
    """Return the program to start and its arguments."""
    if sys.platform == "win32" and not _is_pwsh(shell):
        return "cmd", ["/C", " ".join(command)]
    if shell is not None:
        name, options = shell
        return name, [*options, "-c", " ".join(command)]
    if not command:
        raise ValueError("no command given")
    return command[0], list(command[1:])


async def exec_command(command: Sequence[str], shell: Shell | None = None) -> tuple[bytes, bytes, int]:
    """Run the command once and return its stdout, stderr and exit code."""
    program, args = prepare_command(command, shell)
    size = shutil.get_terminal_size()
    env = {**os.environ, "COLUMNS": str(size.columns), "LINES": str(size.lines)}
    process = await asyncio.create_subprocess_exec(
        program,
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env,
    )
    stdout, stderr = await process.communicate()
    code = process.returncode
    if code is None or (sys.platform != "win32" and code < 0):
        raise RuntimeError("failed to get exit code")
    return stdout, stderr, code