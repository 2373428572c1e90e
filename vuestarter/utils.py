"""Shared utility functions for vuestarter.

Provides async command execution, JSON I/O, name helpers and Rich-based
console reporting.  The subprocess helpers inherit the terminal by default
because package managers print their own progress.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CommandError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command failed with exit code {returncode}: {' '.join(command)}"
        )


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    capture: bool = False,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Executable followed by its arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for the process to exit on its own.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        FileNotFoundError: If the executable does not exist.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


async def run_checked(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
) -> None:
    """Run *cmd* with inherited output and raise ``CommandError`` on failure."""
    try:
        returncode, _, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    except FileNotFoundError as exc:
        raise CommandError(cmd, 127, str(exc)) from exc
    if returncode != 0:
        raise CommandError(cmd, returncode, stderr)


async def git_user() -> str | None:
    """Return ``"Name <email>"`` from the git configuration, if available."""
    name = email = ""
    try:
        code, out, _ = await run_command(
            ["git", "config", "--get", "user.name"], capture=True, timeout=10
        )
        if code == 0:
            name = out
        code, out, _ = await run_command(
            ["git", "config", "--get", "user.email"], capture=True, timeout=10
        )
        if code == 0:
            email = out
    except FileNotFoundError:
        return None

    if not name:
        return None
    return f"{name} <{email}>" if email else name


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


_PACKAGE_NAME_MAX = 214
_PACKAGE_NAME_RE = re.compile(r"^(?:@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")


def sanitize_name(name: str) -> str:
    """Convert an arbitrary directory name to a safe package name.

    Examples::

        sanitize_name("My Vue App") -> "my-vue-app"
        sanitize_name("  shop (v2)  ") -> "shop-v2"
    """
    result = re.sub(r"[^a-zA-Z0-9_.-]", "-", name.strip().lower())
    result = re.sub(r"-+", "-", result)
    return result.strip("-")


def validate_package_name(name: str) -> list[str]:
    """Return a list of problems that make *name* an invalid npm package name.

    An empty list means the name is valid.
    """
    problems: list[str] = []
    if not name:
        return ["name length must be greater than zero"]
    if len(name) > _PACKAGE_NAME_MAX:
        problems.append(f"name can no longer contain more than {_PACKAGE_NAME_MAX} characters")
    if name.startswith("."):
        problems.append("name cannot start with a period")
    if name.startswith("_"):
        problems.append("name cannot start with an underscore")
    if name != name.strip():
        problems.append("name cannot contain leading or trailing spaces")
    if name.lower() != name:
        problems.append("name can no longer contain capital letters")
    if not problems and not _PACKAGE_NAME_RE.match(name):
        problems.append("name can only contain URL-friendly characters")
    return problems


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file that holds a top-level object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


def save_json(data: dict[str, Any], path: str | Path) -> None:
    """Write *data* as 2-space indented JSON followed by a newline."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


PHASE_NAMES: dict[int, str] = {
    1: "PROMPT",
    2: "FILTER",
    3: "RENDER",
    4: "COMPLETE",
}

PHASE_COLORS: dict[int, str] = {
    1: "bright_cyan",
    2: "bright_yellow",
    3: "bright_green",
    4: "bright_blue",
}


def print_phase_header(phase: int, name: str) -> None:
    """Print a full-width rule announcing a generation phase."""
    color = PHASE_COLORS.get(phase, "white")
    console.print()
    console.print(
        Rule(
            f"[bold {color}] Phase {phase}: {name.upper()} [/bold {color}]",
            style=color,
        )
    )
    console.print()


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
