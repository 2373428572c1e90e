"""vuestarter configuration.

Typed run configuration built on Pydantic v2 so it can be validated at
construction time and serialised to/from JSON or environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "starter"


class Config(BaseModel):
    """Settings for one generation run.

    Instances are created by the CLI entry point (or by tests) and passed to
    ``Pipeline``.
    """

    template_dir: Path = Field(
        default=DEFAULT_TEMPLATE_DIR,
        description="Directory holding meta.yml and the template/ tree",
    )
    output_dir: Path = Field(default=Path("."))
    project_name: str = Field(default="", description="Destination directory name")
    in_place: bool = Field(default=False, description="Generate into output_dir itself")
    scenario: str | None = Field(default=None, description="Test scenario to answer prompts")
    interactive: bool = Field(default=True)
    run_complete: bool = Field(default=True, description="Run the completion hook")
    command_timeout: float | None = Field(
        default=None, gt=0, description="Timeout for install/lint commands in seconds"
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def meta_path(self) -> Path:
        return self.template_dir / "meta.yml"

    @property
    def template_path(self) -> Path:
        """Root of the template file tree."""
        return self.template_dir / "template"

    @property
    def dest_path(self) -> Path:
        """Directory the project is written to."""
        if self.in_place:
            return self.output_dir
        return self.output_dir / self.project_name

    @property
    def dest_dir_name(self) -> str:
        if self.in_place:
            return self.output_dir.resolve().name
        return self.project_name

    @property
    def test_mode(self) -> bool:
        return self.scenario is not None

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            VUE_TEMPL_TEST (scenario name), VUESTARTER_TEMPLATE_DIR,
            VUESTARTER_OUTPUT_DIR, VUESTARTER_PROJECT_NAME,
            VUESTARTER_COMMAND_TIMEOUT.
        """
        scenario = os.environ.get("VUE_TEMPL_TEST") or None
        timeout = os.environ.get("VUESTARTER_COMMAND_TIMEOUT")
        return cls(
            template_dir=Path(os.environ.get("VUESTARTER_TEMPLATE_DIR", str(DEFAULT_TEMPLATE_DIR))),
            output_dir=Path(os.environ.get("VUESTARTER_OUTPUT_DIR", ".")),
            project_name=os.environ.get("VUESTARTER_PROJECT_NAME", ""),
            scenario=scenario,
            interactive=scenario is None,
            command_timeout=float(timeout) if timeout else None,
        )
