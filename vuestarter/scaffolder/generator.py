"""Template copy engine.

Walks a template tree, drops the files the filter table excludes and writes
the survivors to the destination: ``*.j2`` files are rendered with Jinja2
(suffix stripped), everything else is copied byte for byte.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..filters import FileFilter
from ..schema import FilterRule, TemplateMeta
from .templates import TEMPLATE_SUFFIX, TemplateRenderer


@dataclass
class GenerationResult:
    """Outcome of writing a template tree to disk."""

    project_root: Path
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def output_name(template_path: str) -> str:
    """Map a template path to the path it is written to."""
    if template_path.endswith(TEMPLATE_SUFFIX):
        return template_path[: -len(TEMPLATE_SUFFIX)]
    return template_path


class ProjectGenerator:
    """Filters and renders a template tree into a project directory."""

    def __init__(self, meta: TemplateMeta, template_root: str | Path) -> None:
        self.meta = meta
        self.template_root = Path(template_root)
        self.renderer = TemplateRenderer(self.template_root)
        self.file_filter = FileFilter(meta.filters)

    # -- Discovery ---------------------------------------------------------

    def list_templates(self) -> list[str]:
        """Return every file of the template tree as a sorted POSIX path."""
        if not self.template_root.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_root).as_posix()
            for p in self.template_root.rglob("*")
            if p.is_file()
        )

    def select(self, answers: Mapping[str, Any]) -> tuple[list[str], list[str]]:
        """Split template paths into ``(included, excluded)``.

        Filters are matched against output names, so ``.eslintrc.js`` also
        governs ``.eslintrc.js.j2``.
        """
        included: list[str] = []
        excluded: list[str] = []
        for template_path in self.list_templates():
            if self.file_filter.includes(output_name(template_path), answers):
                included.append(template_path)
            else:
                excluded.append(template_path)
        return included, excluded

    def dead_rules(self) -> list[FilterRule]:
        """Filter rules whose glob matches no file of the template tree."""
        return self.file_filter.unmatched_rules(
            output_name(p) for p in self.list_templates()
        )

    # -- Generation --------------------------------------------------------

    async def generate(
        self,
        project_root: str | Path,
        answers: Mapping[str, Any],
        context: dict[str, Any] | None = None,
    ) -> GenerationResult:
        """Write the files selected by *answers* under *project_root*.

        Args:
            project_root: Destination directory (created if missing).
            answers: Final answer store used for filtering and rendering.
            context: Extra render variables (``dest_dir_name``, ``in_place``).
        """
        root = Path(project_root)
        await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)

        render_context = {**(context or {}), **dict(answers)}
        included, excluded = self.select(answers)
        result = GenerationResult(project_root=root, skipped=excluded)

        for template_path in included:
            target = root / output_name(template_path)
            if template_path.endswith(TEMPLATE_SUFFIX):
                await self.renderer.render_to_file(
                    template_path, target, render_context, self.meta.version
                )
            else:
                await asyncio.to_thread(
                    _copy_file, self.template_root / template_path, target
                )
            result.written.append(output_name(template_path))

        return result


def _copy_file(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
