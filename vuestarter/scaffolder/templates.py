"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which renders ``.j2`` files of a template
tree with the collected answers.  Files without the ``.j2`` suffix are not
rendered; the generator copies them verbatim, so Vue single-file components
can keep their own ``{{ }}`` syntax.

Helpers available inside templates:

* ``if_or(a, b)`` / ``if_and(a, b)``: truth of ``a || b`` / ``a && b``
* ``template_version()``: version of the template being rendered, read from
  the render context rather than from global state
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, pass_context, select_autoescape
from jinja2.runtime import Context, Undefined

from ..predicates import is_truthy

TEMPLATE_SUFFIX = ".j2"

# Context key read by the template_version() helper.
_VERSION_KEY = "__template_version__"


class TemplateRenderer:
    """Renders Jinja2 templates found under *template_dir*."""

    def __init__(self, template_dir: str | Path) -> None:
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals["if_or"] = _if_or
        self.env.globals["if_and"] = _if_and
        self.env.globals["template_version"] = _template_version

    # -- Single template rendering -----------------------------------------

    def render(
        self,
        template_path: str,
        context: dict[str, Any],
        template_version: str = "",
    ) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: POSIX path relative to the template directory
                (e.g. ``"src/main.js.j2"``).
            context: Answers plus run metadata (``dest_dir_name``,
                ``in_place``).
            template_version: Value returned by ``template_version()``.
        """
        template = self.env.get_template(template_path)
        return template.render({**context, _VERSION_KEY: template_version})

    def render_string(
        self,
        template_string: str,
        context: dict[str, Any],
        template_version: str = "",
    ) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render({**context, _VERSION_KEY: template_version})

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
        template_version: str = "",
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context, template_version)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out


# ---------------------------------------------------------------------------
# Template helpers
# ---------------------------------------------------------------------------


def _value(value: Any) -> Any:
    return None if isinstance(value, Undefined) else value


def _if_or(v1: Any, v2: Any) -> bool:
    return is_truthy(_value(v1)) or is_truthy(_value(v2))


def _if_and(v1: Any, v2: Any) -> bool:
    return is_truthy(_value(v1)) and is_truthy(_value(v2))


@pass_context
def _template_version(context: Context) -> str:
    return str(context.get(_VERSION_KEY, ""))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
