"""
Prompt Builder: generation request text for multiple-choice tests.

Two public functions:

  build_generation_prompt(topic_name, profile, num_questions, ...) -> str
    The full request: topic, optional description and reference material,
    difficulty profile, the strict "Question N. / A)..D) / Answer: / Explanation:"
    output format, and the recall / application / analysis split.

  build_shortfall_prompt(topic_name, profile, shortfall, ...) -> str
    Same request for only the missing number of questions, with an explicit
    quality-improvement notice appended. Used by the regeneration loop.

Both are pure: identical inputs always give identical text.
"""
from __future__ import annotations

import math

from app.core.difficulty import DifficultyProfile
from app.prompts.test_generation import (
    QUALITY_RETRY_NOTICE,
    QUESTION_TYPES,
    TEST_GENERATION_PROMPT,
)


def question_type_split(num_questions: int) -> tuple[int, int, int]:
    """Target recall/application/analysis counts (30/40/30, rounded up)."""
    # integer numerators: 10 * 0.3 is 3.0000000000000004 in floating point
    return (
        math.ceil(num_questions * 3 / 10),
        math.ceil(num_questions * 4 / 10),
        math.ceil(num_questions * 3 / 10),
    )


def build_generation_prompt(
    topic_name: str,
    profile: DifficultyProfile,
    num_questions: int,
    topic_description: str | None = None,
    reference_material: str | None = None,
) -> str:
    if num_questions <= 0:
        raise ValueError("num_questions must be positive")

    description_block = f"\nTOPIC DESCRIPTION: {topic_description.strip()}" if topic_description else ""
    material_block = (
        f"\n\nREFERENCE MATERIAL:\n{reference_material.strip()}" if reference_material else ""
    )
    recall, application, analysis = question_type_split(num_questions)

    return TEST_GENERATION_PROMPT.format(
        topic_name=topic_name.strip(),
        description_block=description_block,
        material_block=material_block,
        tier=profile.tier,
        complexity=profile.complexity_descriptor,
        num_questions=num_questions,
        keywords=", ".join(profile.focus_keywords) or profile.complexity_descriptor,
        question_types=", ".join(QUESTION_TYPES[:3]),
        recall_count=recall,
        application_count=application,
        analysis_count=analysis,
    )


def build_shortfall_prompt(
    topic_name: str,
    profile: DifficultyProfile,
    shortfall: int,
    topic_description: str | None = None,
    reference_material: str | None = None,
) -> str:
    base = build_generation_prompt(
        topic_name,
        profile,
        shortfall,
        topic_description=topic_description,
        reference_material=reference_material,
    )
    return f"{base}\n\n{QUALITY_RETRY_NOTICE}"
