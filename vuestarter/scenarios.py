"""Named answer sets used to generate the template without a human.

When a scenario is selected (``VUE_TEMPL_TEST=<name>`` or ``--scenario``),
``add_test_answers`` injects ``isNotTest: False`` together with the
scenario's answers before the prompt walk.  Every user-facing prompt is
gated on ``isNotTest``, so none of them is asked.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_FULL: dict[str, Any] = {
    "name": "test",
    "description": "A Vue.js project",
    "author": "CI run",
    "isSmartForm": True,
    "isLiteKit": True,
    "isAuth": True,
    "isVueProgress": True,
    "assetsStructure": True,
    "lint": True,
    "lintConfig": "standard",
    "storybook": True,
    "unit": True,
    "runner": "jest",
    "e2e": True,
    "autoInstall": False,
}

SCENARIOS: dict[str, dict[str, Any]] = {
    "full": _FULL,
    "full-karma-airbnb": {
        **_FULL,
        "isSmartForm": False,
        "isVuelidate": True,
        "isAuth": False,
        "isVuexStore": True,
        "lintConfig": "airbnb",
        "runner": "karma",
    },
    "minimal": {
        "name": "test",
        "description": "A Vue.js project",
        "author": "CI run",
        "isSmartForm": False,
        "isVuelidate": False,
        "isLiteKit": False,
        "isAuth": False,
        "isVueProgress": False,
        "isVuexStore": False,
        "assetsStructure": False,
        "lint": False,
        "storybook": False,
        "unit": False,
        "e2e": False,
        "autoInstall": False,
    },
}


class UnknownScenarioError(Exception):
    """Raised when a scenario name is not defined."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Unknown scenario '{name}' (available: {', '.join(sorted(SCENARIOS))})"
        )


def get_scenario(name: str) -> dict[str, Any]:
    try:
        return dict(SCENARIOS[name])
    except KeyError:
        raise UnknownScenarioError(name) from None


def add_test_answers(metadata: Mapping[str, Any], scenario: str | None) -> dict[str, Any]:
    """Return *metadata* extended with ``isNotTest`` and the scenario answers."""
    data = {**metadata, "isNotTest": scenario is None}
    if scenario is not None:
        data.update(get_scenario(scenario))
    return data
