"""Tests for the difficulty catalog and the generation prompts."""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from app.core.difficulty import DifficultyCatalog, DifficultyProfile, default_catalog
from app.prompts.test_generation import QUALITY_RETRY_NOTICE
from app.services.prompt_builder import (
    build_generation_prompt,
    build_shortfall_prompt,
    question_type_split,
)


class TestDifficultyCatalog:
    def test_default_tiers(self):
        catalog = default_catalog()
        assert catalog.tiers() == ["low", "mid", "high"]
        assert (catalog["low"].question_count, catalog["low"].time_limit_seconds) == (15, 1800)
        assert (catalog["mid"].question_count, catalog["mid"].time_limit_seconds) == (25, 2700)
        assert (catalog["high"].question_count, catalog["high"].time_limit_seconds) == (30, 3600)

    def test_unknown_tier_is_none(self):
        catalog = default_catalog()
        assert catalog.get("extreme") is None
        assert "extreme" not in catalog

    def test_profiles_are_frozen(self):
        profile = default_catalog()["low"]
        with pytest.raises(Exception):
            profile.question_count = 99

    def test_catalog_is_read_only(self):
        catalog = default_catalog()
        with pytest.raises(TypeError):
            catalog._profiles["low"] = None

    def test_non_positive_count_rejected(self):
        with pytest.raises(ValueError):
            DifficultyProfile(tier="x", question_count=0, time_limit_seconds=60,
                              complexity_descriptor="none")

    def test_custom_catalog(self):
        p = DifficultyProfile(tier="quiz", question_count=5, time_limit_seconds=300,
                              complexity_descriptor="warm-up")
        catalog = DifficultyCatalog({"quiz": p})
        assert list(catalog) == ["quiz"]
        assert catalog.get("quiz") is p


class TestQuestionTypeSplit:
    @pytest.mark.parametrize("n, expected", [
        (10, (3, 4, 3)),
        (15, (5, 6, 5)),
        (25, (8, 10, 8)),
        (30, (9, 12, 9)),
        (4, (2, 2, 2)),
        (1, (1, 1, 1)),
    ])
    def test_rounds_up(self, n, expected):
        assert question_type_split(n) == expected


class TestGenerationPrompt:
    def _profile(self):
        return default_catalog()["mid"]

    def test_contains_topic_count_and_format(self):
        prompt = build_generation_prompt("Fractions", self._profile(), 25)
        assert "TOPIC: Fractions" in prompt
        assert "Number of questions: 25" in prompt
        assert "Question 1." in prompt
        assert "Answer: [A/B/C/D]" in prompt
        assert "Explanation:" in prompt
        assert "applying knowledge and analysis" in prompt

    def test_distribution_counts(self):
        prompt = build_generation_prompt("Fractions", self._profile(), 10)
        assert "- 3 questions on facts and definitions (recall)" in prompt
        assert "- 4 questions on understanding and application" in prompt
        assert "- 3 questions on analysis and synthesis" in prompt

    def test_optional_blocks(self):
        bare = build_generation_prompt("Fractions", self._profile(), 5)
        assert "TOPIC DESCRIPTION" not in bare
        assert "REFERENCE MATERIAL" not in bare

        full = build_generation_prompt(
            "Fractions", self._profile(), 5,
            topic_description="Adding unlike fractions",
            reference_material="1/2 + 1/3 = 5/6",
        )
        assert "TOPIC DESCRIPTION: Adding unlike fractions" in full
        assert "REFERENCE MATERIAL:\n1/2 + 1/3 = 5/6" in full

    def test_deterministic(self):
        a = build_generation_prompt("Fractions", self._profile(), 7, "desc", "ref")
        b = build_generation_prompt("Fractions", self._profile(), 7, "desc", "ref")
        assert a == b

    def test_zero_questions_rejected(self):
        with pytest.raises(ValueError):
            build_generation_prompt("Fractions", self._profile(), 0)


class TestShortfallPrompt:
    def test_requests_only_the_shortfall(self):
        prompt = build_shortfall_prompt("Fractions", default_catalog()["low"], 4)
        assert "Number of questions: 4" in prompt
        assert "Generate exactly 4 questions" in prompt
        assert prompt.endswith(QUALITY_RETRY_NOTICE)

    def test_same_request_as_generation_prompt(self):
        profile = default_catalog()["low"]
        base = build_generation_prompt("Fractions", profile, 4)
        assert build_shortfall_prompt("Fractions", profile, 4).startswith(base)
