"""Shared pytest fixtures for the vuestarter test suite.

Provides reusable fixtures for:
- The bundled starter meta and template tree
- A scripted prompt front-end standing in for the terminal
- Answer sets for interactive runs
- Quiet Rich consoles that record their output
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from vuestarter.config import DEFAULT_TEMPLATE_DIR
from vuestarter.schema import Prompt, TemplateMeta, load_meta


# ---------------------------------------------------------------------------
# Bundled template
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def starter_meta() -> TemplateMeta:
    """The meta.yml shipped with the package."""
    return load_meta(DEFAULT_TEMPLATE_DIR / "meta.yml")


@pytest.fixture(scope="session")
def template_root() -> Path:
    """Root of the bundled template tree."""
    return DEFAULT_TEMPLATE_DIR / "template"


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary parent directory for generated projects (auto-cleanup)."""
    project_dir = tmp_path / "projects"
    project_dir.mkdir()
    yield project_dir


# ---------------------------------------------------------------------------
# Prompt front-end
# ---------------------------------------------------------------------------

class ScriptedFrontend:
    """Answers prompts from a dict and records what was asked."""

    def __init__(self, responses: Mapping[str, Any], confirm_answer: bool = True) -> None:
        self.responses = dict(responses)
        self.confirm_answer = confirm_answer
        self.asked: list[str] = []
        self.errors: list[tuple[str, str]] = []
        self.questions: list[str] = []

    def ask(self, prompt: Prompt, answers: Mapping[str, Any]) -> Any:
        self.asked.append(prompt.name)
        return self.responses.get(prompt.name)

    def report_error(self, prompt: Prompt, message: str) -> None:
        self.errors.append((prompt.name, message))

    def confirm(self, question: str, default: bool = True) -> bool:
        self.questions.append(question)
        return self.confirm_answer


@pytest.fixture
def interactive_responses() -> dict[str, Any]:
    """A complete set of terminal answers for the bundled template."""
    return {
        "name": "my-app",
        "description": "",
        "author": "Jane Doe <jane@example.com>",
        "isSmartForm": True,
        "isLiteKit": False,
        "isAuth": True,
        "isVueProgress": False,
        "assetsStructure": True,
        "lint": True,
        "lintConfig": "airbnb",
        "storybook": False,
        "unit": True,
        "runner": "jest",
        "e2e": False,
        "autoInstall": False,
    }


@pytest.fixture
def make_frontend() -> type[ScriptedFrontend]:
    """Factory for scripted front-ends: ``make_frontend({"name": "app"})``."""
    return ScriptedFrontend


@pytest.fixture
def scripted_frontend(interactive_responses: dict[str, Any]) -> ScriptedFrontend:
    return ScriptedFrontend(interactive_responses)


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------

@pytest.fixture
def record_console() -> Console:
    """A Rich console writing to memory; read it back with ``.file.getvalue()``."""
    return Console(file=io.StringIO(), width=200, color_system=None)
