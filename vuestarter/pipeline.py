"""vuestarter generation pipeline.

Implements the four-phase generation run:

Phase 1: PROMPT   -- Load meta.yml, inject test answers, walk the prompts.
Phase 2: FILTER   -- Decide which template files survive.
Phase 3: RENDER   -- Render ``*.j2`` files and copy the rest.
Phase 4: COMPLETE -- Sort dependencies, install, lint-fix, print next steps.

Usage::

    vuestarter my-project
    vuestarter .                      # generate in the current directory
    VUE_TEMPL_TEST=minimal vuestarter test
    python -m vuestarter.pipeline my-project --scenario full
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from vuestarter.answers import AnswerStore
from vuestarter.config import Config
from vuestarter.hooks import complete
from vuestarter.prompts import (
    InvalidAnswerError,
    PromptFrontend,
    PromptWalker,
    RequiredPromptError,
    RichPromptFrontend,
)
from vuestarter.scaffolder import GenerationResult, ProjectGenerator
from vuestarter.scenarios import UnknownScenarioError, add_test_answers
from vuestarter.schema import TemplateMeta, TemplateMetaError, load_meta
from vuestarter.utils import (
    PHASE_NAMES,
    console,
    git_user,
    print_error,
    print_phase_header,
    print_success,
    print_summary_table,
    print_warning,
    sanitize_name,
    validate_package_name,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GenerationError(Exception):
    """Raised when a generation phase fails irrecoverably."""

    def __init__(self, phase: int, message: str) -> None:
        self.phase = phase
        super().__init__(f"Phase {phase} ({PHASE_NAMES.get(phase, '?')}): {message}")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives one generation run.

    Attributes:
        config: Run configuration.
        frontend: Interactive prompt front-end, or ``None`` for
            non-interactive runs.
        answers: Final answer store, available after phase 1.
        result: Written/skipped files, available after phase 3.
    """

    def __init__(self, config: Config, frontend: PromptFrontend | None = None) -> None:
        self.config = config
        if frontend is None and config.interactive and not config.test_mode:
            frontend = RichPromptFrontend(console)
        self.frontend = frontend
        self.answers: AnswerStore | None = None
        self.result: GenerationResult | None = None

    # ------------------------------------------------------------------
    # Meta
    # ------------------------------------------------------------------

    async def load_meta(self) -> TemplateMeta:
        """Load the template meta and apply run-specific prompt defaults."""
        meta = load_meta(self.config.meta_path)
        for prompt, name in meta.forward_references():
            print_warning(
                f"  Prompt '{prompt}' depends on '{name}', which is not answered "
                f"before it; it will always read as false."
            )

        defaults: dict[str, Any] = {"name": sanitize_name(self.config.dest_dir_name) or None}
        if not self.config.test_mode:
            defaults["author"] = await git_user()
        return meta.with_defaults(defaults)

    def render_context(self) -> dict[str, Any]:
        return {
            "dest_dir_name": self.config.dest_dir_name,
            "in_place": self.config.in_place,
        }

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def phase1_prompt(self, meta: TemplateMeta) -> AnswerStore:
        """Walk the prompt schema, starting from the test-mode answers."""
        print_phase_header(1, PHASE_NAMES[1])
        initial = add_test_answers(self.render_context(), self.config.scenario)
        walker = PromptWalker(
            meta,
            frontend=self.frontend,
            validators={"name": validate_package_name},
        )
        self.answers = walker.walk(initial)
        return self.answers

    def phase2_filter(self, generator: ProjectGenerator, answers: AnswerStore) -> list[str]:
        print_phase_header(2, PHASE_NAMES[2])
        included, excluded = generator.select(answers)
        console.print(
            f"  [green]+[/green] {len(included)} file(s) selected, "
            f"{len(excluded)} excluded by filters"
        )
        for rule in generator.dead_rules():
            print_warning(f"  Filter '{rule.glob}' matches no template file")
        return included

    async def phase3_render(
        self, generator: ProjectGenerator, answers: AnswerStore
    ) -> GenerationResult:
        print_phase_header(3, PHASE_NAMES[3])
        self.result = await generator.generate(
            self.config.dest_path, answers, self.render_context()
        )
        console.print(
            f"  [green]+[/green] Wrote {len(self.result.written)} file(s) to "
            f"{escape(str(self.result.project_root))}"
        )
        return self.result

    async def phase4_complete(self, meta: TemplateMeta, answers: AnswerStore) -> bool:
        print_phase_header(4, PHASE_NAMES[4])
        data = {**answers.to_dict(), **self.render_context()}
        return await complete(
            data,
            console=console,
            base=self.config.output_dir,
            timeout=self.config.command_timeout,
            extra_message=meta.complete_message,
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def confirm_destination(self) -> bool:
        """Ask before writing into a non-empty destination (interactive runs only)."""
        dest = self.config.dest_path
        if self.frontend is None or not dest.is_dir() or not any(dest.iterdir()):
            return True
        question = (
            "Generate project in current directory?"
            if self.config.in_place
            else "Target directory exists. Continue?"
        )
        return self.frontend.confirm(question, default=True)

    async def run(self) -> dict[str, Any]:
        """Execute all phases.

        Returns:
            A state dictionary with ``success``, the final ``answers`` and
            the ``written`` / ``skipped`` file lists.

        Raises:
            GenerationError: If the meta cannot be loaded or prompt
                resolution fails.
        """
        console.print(
            Panel(
                f"[bold bright_cyan]vuestarter[/bold bright_cyan]\n"
                f"Template : {escape(str(self.config.template_dir))}\n"
                f"Output   : {escape(str(self.config.dest_path.resolve()))}\n"
                f"Scenario : {escape(self.config.scenario or '(interactive)')}",
                title="[bold]Generate[/bold]",
                border_style="bright_cyan",
            )
        )
        state: dict[str, Any] = {"success": False, "aborted": False}

        if not self.confirm_destination():
            state["aborted"] = True
            return state

        try:
            meta = await self.load_meta()
        except (TemplateMetaError, ValidationError) as exc:
            raise GenerationError(1, str(exc)) from exc

        try:
            answers = self.phase1_prompt(meta)
        except (RequiredPromptError, InvalidAnswerError, UnknownScenarioError) as exc:
            raise GenerationError(1, str(exc)) from exc
        state["answers"] = answers.to_dict()

        generator = ProjectGenerator(meta, self.config.template_path)
        self.phase2_filter(generator, answers)
        result = await self.phase3_render(generator, answers)
        state["written"] = result.written
        state["skipped"] = result.skipped

        state["complete_ok"] = True
        if self.config.run_complete:
            state["complete_ok"] = await self.phase4_complete(meta, answers)

        print_summary_table(
            {
                "Project": escape(str(result.project_root)),
                "Files written": len(result.written),
                "Files skipped": len(result.skipped),
                "Template version": meta.version,
            },
            title="Generation Summary",
        )
        state["success"] = True
        return state


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``vuestarter`` / ``python -m vuestarter.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="vuestarter -- scaffold a Vue.js starter project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  vuestarter my-project\n"
            "  vuestarter .\n"
            "  vuestarter test --scenario minimal --skip-complete\n"
        ),
    )
    parser.add_argument(
        "project",
        nargs="?",
        default=".",
        help="Project directory name (omit or '.' to generate in place)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory the project directory is created in (default: .)",
    )
    parser.add_argument(
        "--template",
        default=None,
        help="Template directory containing meta.yml and template/",
    )
    parser.add_argument(
        "--scenario",
        default=None,
        help="Answer prompts from a test scenario (full, minimal, full-karma-airbnb)",
    )
    parser.add_argument(
        "--skip-complete",
        action="store_true",
        help="Do not sort dependencies, install or lint after generating",
    )

    args = parser.parse_args(argv)

    config = Config.from_env()
    if args.output:
        config.output_dir = Path(args.output)
    if args.template:
        config.template_dir = Path(args.template)
    if args.scenario:
        config.scenario = args.scenario
        config.interactive = False
    if args.skip_complete:
        config.run_complete = False
    if args.project in (".", ""):
        config.in_place = True
    else:
        config.project_name = args.project

    try:
        state = asyncio.run(Pipeline(config).run())
    except GenerationError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    if state.get("aborted"):
        print_warning("Aborted.")
        sys.exit(1)
    print_success("Project generated successfully!")


if __name__ == "__main__":
    main()
