"""Tests for the generation pipeline (vuestarter.pipeline).

Tests cover:
- GenerationError formatting
- load_meta: run-specific defaults, git author lookup, forward reference warnings
- Interactive runs through a scripted front-end
- Non-interactive runs that fall back to defaults
- Failures wrapped in GenerationError
- Destination confirmation and aborts
- The CLI entry point
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from vuestarter.config import Config
from vuestarter.pipeline import GenerationError, Pipeline, main

pytestmark = pytest.mark.unit


@pytest.fixture
def no_git():
    with patch("vuestarter.pipeline.git_user", new=AsyncMock(return_value=None)) as mock:
        yield mock


def _config(output_dir: Path, **overrides) -> Config:
    values = {"output_dir": output_dir, "project_name": "my-app", "run_complete": False}
    values.update(overrides)
    return Config(**values)


# ---------------------------------------------------------------------------
# GenerationError
# ---------------------------------------------------------------------------


class TestGenerationError:
    def test_message(self):
        error = GenerationError(3, "disk full")
        assert error.phase == 3
        assert str(error) == "Phase 3 (RENDER): disk full"


# ---------------------------------------------------------------------------
# load_meta
# ---------------------------------------------------------------------------


class TestLoadMeta:
    @pytest.mark.asyncio
    async def test_defaults_from_destination_and_git(self, tmp_project_dir: Path):
        config = _config(tmp_project_dir, project_name="My Shop")
        with patch(
            "vuestarter.pipeline.git_user",
            new=AsyncMock(return_value="Jane Doe <jane@example.com>"),
        ):
            meta = await Pipeline(config, frontend=None).load_meta()

        assert meta.prompt("name").default == "my-shop"
        assert meta.prompt("author").default == "Jane Doe <jane@example.com>"

    @pytest.mark.asyncio
    async def test_test_mode_skips_git(self, tmp_project_dir: Path, no_git: AsyncMock):
        config = _config(tmp_project_dir, scenario="full")
        await Pipeline(config).load_meta()
        no_git.assert_not_called()

    @pytest.mark.asyncio
    async def test_forward_reference_warning(self, tmp_path: Path, no_git: AsyncMock):
        template_dir = tmp_path / "tpl"
        (template_dir / "template").mkdir(parents=True)
        (template_dir / "meta.yml").write_text(
            "prompts:\n"
            "  a:\n    type: confirm\n    when: b\n"
            "  b:\n    type: confirm\n",
            encoding="utf-8",
        )
        config = _config(tmp_path, template_dir=template_dir, interactive=False)

        with patch("vuestarter.pipeline.print_warning") as mock_warn:
            await Pipeline(config).load_meta()

        assert "'a' depends on 'b'" in mock_warn.call_args.args[0]

    @pytest.mark.asyncio
    async def test_missing_meta(self, tmp_path: Path, no_git: AsyncMock):
        config = _config(tmp_path, template_dir=tmp_path / "nowhere", interactive=False)

        with pytest.raises(GenerationError) as exc_info:
            await Pipeline(config).run()
        assert exc_info.value.phase == 1


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


class TestRun:
    @pytest.mark.asyncio
    async def test_interactive_run(
        self, tmp_project_dir: Path, scripted_frontend, no_git: AsyncMock
    ):
        pipeline = Pipeline(_config(tmp_project_dir), frontend=scripted_frontend)

        state = await pipeline.run()

        project = tmp_project_dir / "my-app"
        assert state["success"] is True
        assert state["aborted"] is False
        assert state["answers"]["isNotTest"] is True
        assert state["answers"]["lintConfig"] == "airbnb"
        assert "src/modules/auth/index.js" in state["written"]
        assert "test/unit/karma.conf.js" in state["skipped"]

        package = json.loads((project / "package.json").read_text(encoding="utf-8"))
        assert package["name"] == "my-app"
        assert package["author"] == "Jane Doe <jane@example.com>"
        assert "airbnb-base" in (project / ".eslintrc.js").read_text(encoding="utf-8")
        assert not (project / ".storybook").exists()

    @pytest.mark.asyncio
    async def test_non_interactive_defaults(self, tmp_project_dir: Path, no_git: AsyncMock):
        pipeline = Pipeline(_config(tmp_project_dir, interactive=False))

        state = await pipeline.run()

        assert pipeline.frontend is None
        assert state["answers"]["name"] == "my-app"
        assert state["answers"]["lintConfig"] == "standard"
        assert (tmp_project_dir / "my-app" / ".storybook" / "config.js").is_file()

    @pytest.mark.asyncio
    async def test_invalid_name(
        self, tmp_project_dir: Path, interactive_responses, make_frontend, no_git: AsyncMock
    ):
        frontend = make_frontend({**interactive_responses, "name": "Bad Name"})

        with pytest.raises(GenerationError) as exc_info:
            await Pipeline(_config(tmp_project_dir), frontend=frontend).run()

        assert exc_info.value.phase == 1
        assert not (tmp_project_dir / "my-app").exists()

    @pytest.mark.asyncio
    async def test_unknown_scenario(self, tmp_project_dir: Path):
        config = _config(tmp_project_dir, scenario="everything", interactive=False)

        with pytest.raises(GenerationError, match="everything"):
            await Pipeline(config).run()

    @pytest.mark.asyncio
    async def test_runs_completion_hook(self, tmp_project_dir: Path):
        config = _config(tmp_project_dir, scenario="minimal", run_complete=True)

        with patch(
            "vuestarter.pipeline.complete", new=AsyncMock(return_value=False)
        ) as mock_complete:
            state = await Pipeline(config).run()

        assert state["complete_ok"] is False
        data = mock_complete.call_args.args[0]
        assert data["dest_dir_name"] == "my-app"
        assert data["in_place"] is False
        assert mock_complete.call_args.kwargs["base"] == tmp_project_dir


class TestConfirmDestination:
    @pytest.mark.asyncio
    async def test_abort_on_non_empty_destination(
        self, tmp_project_dir: Path, interactive_responses, make_frontend, no_git: AsyncMock
    ):
        project = tmp_project_dir / "my-app"
        project.mkdir()
        (project / "keep.txt").write_text("mine", encoding="utf-8")
        frontend = make_frontend(interactive_responses, confirm_answer=False)
        pipeline = Pipeline(_config(tmp_project_dir), frontend=frontend)

        state = await pipeline.run()

        assert state == {"success": False, "aborted": True}
        assert frontend.questions == ["Target directory exists. Continue?"]
        assert frontend.asked == []
        assert sorted(p.name for p in project.iterdir()) == ["keep.txt"]

    def test_in_place_question(self, tmp_project_dir: Path, scripted_frontend):
        (tmp_project_dir / "x").write_text("", encoding="utf-8")
        pipeline = Pipeline(
            _config(tmp_project_dir, in_place=True), frontend=scripted_frontend
        )

        assert pipeline.confirm_destination() is True
        assert scripted_frontend.questions == ["Generate project in current directory?"]

    def test_empty_destination_not_asked(self, tmp_project_dir: Path, scripted_frontend):
        (tmp_project_dir / "my-app").mkdir()
        pipeline = Pipeline(_config(tmp_project_dir), frontend=scripted_frontend)

        assert pipeline.confirm_destination() is True
        assert scripted_frontend.questions == []

    def test_scenario_runs_never_ask(self, tmp_project_dir: Path):
        (tmp_project_dir / "my-app").mkdir()
        (tmp_project_dir / "my-app" / "x").write_text("", encoding="utf-8")
        pipeline = Pipeline(_config(tmp_project_dir, scenario="full", interactive=False))

        assert pipeline.confirm_destination() is True


class TestMarkup:
    @pytest.mark.asyncio
    async def test_bracketed_paths_are_printed_verbatim(
        self, tmp_path: Path, record_console, no_git: AsyncMock
    ):
        output_dir = tmp_path / "out[v2]"
        config = _config(output_dir, project_name="shop", scenario="minimal", interactive=False)

        with patch("vuestarter.pipeline.console", record_console):
            await Pipeline(config).run()

        output = record_console.file.getvalue()
        assert "out[v2]" in output
        assert (output_dir / "shop" / "package.json").is_file()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch: pytest.MonkeyPatch):
        for name in (
            "VUE_TEMPL_TEST",
            "VUESTARTER_TEMPLATE_DIR",
            "VUESTARTER_OUTPUT_DIR",
            "VUESTARTER_PROJECT_NAME",
            "VUESTARTER_COMMAND_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_scenario_run(self, tmp_project_dir: Path):
        main(["shop", "--scenario", "minimal", "--skip-complete", "-o", str(tmp_project_dir)])

        project = tmp_project_dir / "shop"
        assert (project / "package.json").is_file()
        assert not (project / "src" / "vuex").exists()

    def test_scenario_from_env(self, tmp_project_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("VUE_TEMPL_TEST", "full")
        main(["shop", "--skip-complete", "-o", str(tmp_project_dir)])

        assert (tmp_project_dir / "shop" / "src" / "vuex" / "auth" / "index.js").is_file()

    def test_in_place(self, tmp_project_dir: Path):
        main([".", "--scenario", "minimal", "--skip-complete", "-o", str(tmp_project_dir)])
        assert (tmp_project_dir / "package.json").is_file()

    def test_unknown_scenario_exits(self, tmp_project_dir: Path):
        with pytest.raises(SystemExit) as exc_info:
            main(["shop", "--scenario", "everything", "-o", str(tmp_project_dir)])
        assert exc_info.value.code == 1
