"""Unit tests for test scenarios (vuestarter.scenarios)."""

from __future__ import annotations

import pytest

from vuestarter.scenarios import SCENARIOS, UnknownScenarioError, add_test_answers, get_scenario
from vuestarter.schema import TemplateMeta

pytestmark = pytest.mark.unit


class TestAddTestAnswers:
    def test_interactive_run(self):
        assert add_test_answers({}, None) == {"isNotTest": True}

    def test_keeps_metadata(self):
        data = add_test_answers({"dest_dir_name": "app", "in_place": False}, "full")
        assert data["dest_dir_name"] == "app"
        assert data["in_place"] is False

    def test_scenario_run(self):
        data = add_test_answers({}, "full")
        assert data["isNotTest"] is False
        assert data["isAuth"] is True
        assert data["runner"] == "jest"

    def test_unknown_scenario(self):
        with pytest.raises(UnknownScenarioError) as exc_info:
            add_test_answers({}, "everything")
        assert exc_info.value.name == "everything"
        assert "minimal" in str(exc_info.value)


class TestScenarios:
    def test_get_scenario_returns_copy(self):
        answers = get_scenario("minimal")
        answers["lint"] = True
        assert SCENARIOS["minimal"]["lint"] is False

    def test_karma_variant_overrides_full(self):
        karma = get_scenario("full-karma-airbnb")
        assert karma["runner"] == "karma"
        assert karma["lintConfig"] == "airbnb"
        assert karma["isVuexStore"] is True
        assert karma["e2e"] is True

    @pytest.mark.parametrize("name", sorted(SCENARIOS))
    def test_answers_match_schema(self, name: str, starter_meta: TemplateMeta):
        answers = get_scenario(name)
        declared = {prompt.name for prompt in starter_meta.prompts}

        assert set(answers) <= declared
        for prompt in starter_meta.prompts:
            if prompt.type == "list" and prompt.name in answers:
                assert answers[prompt.name] in prompt.choice_values()
