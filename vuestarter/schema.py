"""Template meta: prompt schema and file filter table.

A template ships a ``meta.yml`` next to its ``template/`` directory::

    version: 1.4.0
    prompts:
      isAuth:
        when: isNotTest
        type: confirm
        message: Add authentication?
    filters:
      src/modules/auth/**/*: isAuth

Prompts keep their declaration order, which is also the order in which they
are asked.  Every ``when`` and filter predicate is parsed while the meta is
validated, so a typo in an expression fails at load time rather than halfway
through a generation run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from .predicates import Predicate, parse_predicate

# Names the pipeline injects before any prompt is asked.
SYNTHESIZED_NAMES: frozenset[str] = frozenset({"isNotTest"})


class TemplateMetaError(Exception):
    """Raised when a template meta file is missing or malformed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


# ---------------------------------------------------------------------------
# Prompt schema
# ---------------------------------------------------------------------------


class Choice(BaseModel):
    """One selectable entry of a ``list`` prompt."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Label shown to the user")
    value: str | bool | None = Field(..., description="Value stored as the answer")
    short: str = Field(default="", description="Label echoed once selected")

    @property
    def display(self) -> str:
        return self.short or self.name


class Prompt(BaseModel):
    """A single question posed during scaffolding."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Literal["string", "confirm", "list"] = "string"
    message: str = ""
    default: Any = None
    when: str | bool = True
    required: bool = False
    choices: tuple[Choice, ...] = ()

    _when: Predicate = PrivateAttr()

    @model_validator(mode="after")
    def _compile(self) -> Prompt:
        if self.type == "list" and not self.choices:
            raise ValueError(f"list prompt '{self.name}' declares no choices")
        if self.type != "list" and self.choices:
            raise ValueError(f"only list prompts may declare choices ('{self.name}')")
        self._when = parse_predicate(self.when)
        return self

    @property
    def label(self) -> str:
        return self.message or self.name

    @property
    def predicate(self) -> Predicate:
        """The compiled visibility predicate."""
        return self._when

    def choice_values(self) -> list[Any]:
        return [choice.value for choice in self.choices]

    def effective_default(self) -> Any:
        """Value used when the prompt is visible but receives no input.

        ``confirm`` prompts default to ``True`` and ``list`` prompts to their
        first choice when the schema does not say otherwise.
        """
        if self.default is not None:
            return self.default
        if self.type == "confirm":
            return True
        if self.type == "list":
            return self.choices[0].value
        return ""


# ---------------------------------------------------------------------------
# Filter table
# ---------------------------------------------------------------------------


class FilterRule(BaseModel):
    """A ``(glob, predicate)`` pair gating whether matching files are emitted."""

    model_config = ConfigDict(frozen=True)

    glob: str
    condition: str | bool

    _predicate: Predicate = PrivateAttr()

    @model_validator(mode="after")
    def _compile(self) -> FilterRule:
        self._predicate = parse_predicate(self.condition)
        return self

    @property
    def predicate(self) -> Predicate:
        return self._predicate


# ---------------------------------------------------------------------------
# Template meta
# ---------------------------------------------------------------------------


class TemplateMeta(BaseModel):
    """Everything a template declares besides its files."""

    version: str = Field(default="0.0.0")
    prompts: tuple[Prompt, ...] = ()
    filters: tuple[FilterRule, ...] = ()
    complete_message: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_mappings(cls, data: Any) -> Any:
        """Accept the ``name -> definition`` / ``glob -> predicate`` mappings of meta.yml."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        prompts = data.get("prompts")
        if isinstance(prompts, dict):
            data["prompts"] = [
                {"name": name, **(definition or {})} for name, definition in prompts.items()
            ]
        filters = data.get("filters")
        if isinstance(filters, dict):
            data["filters"] = [
                {"glob": glob, "condition": condition} for glob, condition in filters.items()
            ]
        if data.get("version") is not None:
            data["version"] = str(data["version"])
        return data

    @model_validator(mode="after")
    def _unique_prompt_names(self) -> TemplateMeta:
        seen: set[str] = set()
        for prompt in self.prompts:
            if prompt.name in seen:
                raise ValueError(f"duplicate prompt '{prompt.name}'")
            seen.add(prompt.name)
        return self

    def prompt(self, name: str) -> Prompt:
        for prompt in self.prompts:
            if prompt.name == name:
                return prompt
        raise KeyError(name)

    def with_defaults(self, defaults: dict[str, Any]) -> TemplateMeta:
        """Return a copy whose prompts named in *defaults* use the given default."""
        prompts = tuple(
            prompt.model_copy(update={"default": defaults[prompt.name]})
            if defaults.get(prompt.name) is not None
            else prompt
            for prompt in self.prompts
        )
        return self.model_copy(update={"prompts": prompts})

    def forward_references(self) -> list[tuple[str, str]]:
        """List ``(prompt, name)`` pairs where a ``when`` reads a later or unknown name.

        Such references always see an absent answer and therefore evaluate as
        falsy.
        """
        found: list[tuple[str, str]] = []
        declared: set[str] = set(SYNTHESIZED_NAMES)
        for prompt in self.prompts:
            for name in sorted(prompt.predicate.identifiers() - declared):
                found.append((prompt.name, name))
            declared.add(prompt.name)
        return found


def load_meta(path: str | Path) -> TemplateMeta:
    """Load and validate a ``meta.yml`` file.

    Raises:
        TemplateMetaError: If the file is missing or is not a YAML mapping.
        pydantic.ValidationError: If the content does not describe a valid
            schema, including malformed predicates.
    """
    meta_path = Path(path)
    if not meta_path.is_file():
        raise TemplateMetaError(meta_path, "template meta file not found")
    data = yaml.safe_load(meta_path.read_text(encoding="utf-8"))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TemplateMetaError(meta_path, "template meta must be a mapping")
    return TemplateMeta.model_validate(data)
