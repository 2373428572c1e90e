"""Post-generation hook.

Runs after the project files are on disk: sorts the ``package.json``
dependencies, optionally installs them and applies the lint autofix, then
prints how to get started.  Install and lint failures are reported but do
not fail the generation.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from .utils import CommandError, load_json, run_checked, save_json
from .utils import console as default_console

LINT_STYLES = ("standard", "airbnb")
INSTALLERS = ("npm", "yarn")
DOCS_URL = "https://vuejs-templates.github.io/webpack"


def project_dir(data: dict[str, Any], base: Path | None = None) -> Path:
    """Directory the project was generated into."""
    root = base if base is not None else Path.cwd()
    if data.get("in_place"):
        return root
    return root / data.get("dest_dir_name", "")


def sort_dependencies(project: Path) -> None:
    """Sort ``dependencies`` and ``devDependencies`` of ``package.json`` by name."""
    package_json = project / "package.json"
    package = load_json(package_json)
    for key in ("devDependencies", "dependencies"):
        if isinstance(package.get(key), dict):
            package[key] = dict(sorted(package[key].items()))
    save_json(package, package_json)


def uses_lint_fix(data: dict[str, Any]) -> bool:
    return bool(data.get("lint")) and data.get("lintConfig") in LINT_STYLES


async def install_dependencies(
    project: Path,
    executable: str,
    console: Console,
    timeout: float | None = None,
) -> None:
    """Run ``<executable> install`` in *project*."""
    console.print("\n\n[green]# Installing project dependencies ...[/green]")
    console.print("# ========================\n")
    await run_checked([executable, "install"], cwd=project, timeout=timeout)


async def run_lint_fix(
    project: Path,
    data: dict[str, Any],
    console: Console,
    timeout: float | None = None,
) -> None:
    """Run the lint autofix when a preset with fixable rules was chosen."""
    if not uses_lint_fix(data):
        return
    console.print(
        "\n\n[green]Running eslint --fix to comply with chosen preset rules...[/green]"
    )
    console.print("# ========================\n")
    executable = data["autoInstall"]
    if executable == "npm":
        args = ["run", "lint", "--", "--fix"]
    else:
        args = ["run", "lint", "--fix"]
    await run_checked([executable, *args], cwd=project, timeout=timeout)


def completion_message(data: dict[str, Any], extra: str = "") -> str:
    """Build the getting-started message shown at the end of a run (Rich markup)."""
    steps: list[str] = []
    if not data.get("in_place"):
        steps.append(f"cd {data.get('dest_dir_name', '')}")
    if not data.get("autoInstall"):
        steps.append("npm install (or if using yarn: yarn)")
        if uses_lint_fix(data):
            steps.append("npm run lint -- --fix (or for yarn: yarn run lint --fix)")
    steps.append("npm run dev")

    lines = [
        "",
        "# [green]Project initialization finished![/green]",
        "# ========================",
        "",
        "To get started:",
        "",
        *(f"  [yellow]{escape(step)}[/yellow]" for step in steps),
        "",
        f"Documentation can be found at {DOCS_URL}",
    ]
    if extra:
        lines.extend(["", extra])
    return "\n".join(lines) + "\n"


def print_message(data: dict[str, Any], console: Console, extra: str = "") -> None:
    console.print(completion_message(data, extra))


async def complete(
    data: dict[str, Any],
    *,
    console: Console | None = None,
    base: Path | None = None,
    timeout: float | None = None,
    extra_message: str = "",
) -> bool:
    """Completion hook.

    Args:
        data: Final answers plus ``dest_dir_name`` / ``in_place``.
        console: Output console (the colorizer).
        base: Directory the destination is relative to. Defaults to the
            current working directory.
        timeout: Per-command timeout; ``None`` waits indefinitely.
        extra_message: Template-specific text appended to the summary.

    Returns:
        ``False`` if install or lint-fix failed, ``True`` otherwise.  The
        failure is printed, never raised.
    """
    out = console or default_console
    project = project_dir(data, base)
    await asyncio.to_thread(sort_dependencies, project)

    installer = data.get("autoInstall")
    if installer not in INSTALLERS:
        print_message(data, out, extra_message)
        return True

    try:
        await install_dependencies(project, installer, out, timeout)
        await run_lint_fix(project, data, out, timeout)
    except CommandError as exc:
        out.print(f"[red]Error:[/red] {escape(str(exc))}")
        return False

    print_message(data, out, extra_message)
    return True
