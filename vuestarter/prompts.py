"""Prompt schema walker and the interactive Rich front-end.

The walker resolves every prompt in declaration order, so a ``when``
predicate sees the answers given to the prompts above it.  A hidden prompt
contributes nothing to the answer store and later predicates read it as
falsy.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt as TextPrompt
from rich.table import Table

from .answers import AnswerStore
from .schema import Prompt, TemplateMeta
from .utils import console as default_console

# A validator returns a list of problems; an empty list means valid.
Validator = Callable[[Any], list[str]]


class RequiredPromptError(Exception):
    """Raised when a required prompt resolves to an empty value."""

    def __init__(self, prompt: str) -> None:
        self.prompt = prompt
        super().__init__(f"A value is required for '{prompt}'")


class InvalidAnswerError(Exception):
    """Raised when an answer fails validation or is not a declared choice."""

    def __init__(self, prompt: str, reason: str) -> None:
        self.prompt = prompt
        self.reason = reason
        super().__init__(f"Invalid answer for '{prompt}': {reason}")


class PromptFrontend(Protocol):
    """User-facing collaborator that collects answers."""

    def ask(self, prompt: Prompt, answers: Mapping[str, Any]) -> Any:
        """Return the user's answer, or ``None`` when nothing was entered."""
        ...

    def report_error(self, prompt: Prompt, message: str) -> None:
        ...

    def confirm(self, question: str, default: bool = True) -> bool:
        """Ask a yes/no question outside the prompt schema."""
        ...


class RichPromptFrontend:
    """Asks prompts on the terminal with ``rich.prompt``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def ask(self, prompt: Prompt, answers: Mapping[str, Any]) -> Any:
        default = prompt.effective_default()
        if prompt.type == "confirm":
            return Confirm.ask(prompt.label, default=bool(default), console=self.console)
        if prompt.type == "list":
            return self._ask_choice(prompt, default)
        if default:
            return TextPrompt.ask(prompt.label, default=str(default), console=self.console)
        return TextPrompt.ask(prompt.label, default="", show_default=False, console=self.console)

    def _ask_choice(self, prompt: Prompt, default: Any) -> Any:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("#", style="bold cyan", justify="right")
        table.add_column("Choice")
        default_index = 1
        for index, choice in enumerate(prompt.choices, start=1):
            table.add_row(str(index), choice.name)
            if choice.value == default and type(choice.value) is type(default):
                default_index = index

        self.console.print(f"[bold]{prompt.label}[/bold]")
        self.console.print(table)
        selected = TextPrompt.ask(
            "Choice",
            choices=[str(i) for i in range(1, len(prompt.choices) + 1)],
            default=str(default_index),
            console=self.console,
        )
        choice = prompt.choices[int(selected) - 1]
        self.console.print(f"  [green]>[/green] {choice.display}")
        return choice.value

    def report_error(self, prompt: Prompt, message: str) -> None:
        self.console.print(f"[bold red]{prompt.label}:[/bold red] {escape(message)}")

    def confirm(self, question: str, default: bool = True) -> bool:
        return Confirm.ask(question, default=default, console=self.console)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PromptWalker:
    """Produces the final answer store for one generation run.

    Args:
        meta: The template meta whose prompts are walked.
        frontend: Interactive collaborator.  ``None`` runs non-interactively:
            visible prompts without a pre-supplied answer take their default.
        validators: Extra per-prompt validators keyed by prompt name.
    """

    def __init__(
        self,
        meta: TemplateMeta,
        frontend: PromptFrontend | None = None,
        validators: Mapping[str, Validator] | None = None,
    ) -> None:
        self.meta = meta
        self.frontend = frontend
        self.validators = dict(validators or {})

    def walk(self, initial: Mapping[str, Any] | None = None) -> AnswerStore:
        """Resolve all prompts starting from the pre-supplied *initial* answers."""
        answers = AnswerStore(initial)
        for prompt in self.meta.prompts:
            if not prompt.predicate.evaluate(answers):
                continue
            if prompt.name in answers:
                # Pre-supplied (scenario) answers are validated but never re-asked.
                self._validate(prompt, answers[prompt.name])
                continue
            value = self.resolve(prompt, answers)
            answers = answers.with_answer(prompt.name, value)
        return answers

    def resolve(self, prompt: Prompt, answers: AnswerStore) -> Any:
        """Ask (or default) a single visible prompt and validate the result."""
        value = None
        if self.frontend is not None:
            value = self.frontend.ask(prompt, answers)
        if isinstance(value, str):
            value = value.strip()
        if _is_empty(value):
            # Required prompts without a default stay empty and fail below.
            value = prompt.effective_default()
        self._validate(prompt, value)
        return value

    def _validate(self, prompt: Prompt, value: Any) -> None:
        if prompt.required and _is_empty(value):
            error: Exception = RequiredPromptError(prompt.name)
            self._report(prompt, str(error))
            raise error

        if prompt.type == "list":
            if not any(
                value == allowed and type(value) is type(allowed)
                for allowed in prompt.choice_values()
            ):
                error = InvalidAnswerError(prompt.name, f"{value!r} is not one of the choices")
                self._report(prompt, error.reason)
                raise error

        validator = self.validators.get(prompt.name)
        if validator is not None:
            problems = validator(value)
            if problems:
                error = InvalidAnswerError(prompt.name, "; ".join(problems))
                self._report(prompt, error.reason)
                raise error

    def _report(self, prompt: Prompt, message: str) -> None:
        if self.frontend is not None:
            self.frontend.report_error(prompt, message)
