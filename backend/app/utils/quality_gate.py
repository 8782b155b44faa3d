"""quality_gate.py: heuristic accept/reject checks for candidate questions.

Runs on every parsed candidate before it may join a test. Rejected candidates
are dropped by the caller; nothing here raises or mutates the candidate.

Checks (failure code → rule):
  SHORT_QUESTION     question text shorter than 10 characters
  SHORT_EXPLANATION  explanation shorter than 20 characters
  SHORT_OPTION       any option text shorter than 3 characters
  DUPLICATE_OPTIONS  two options share the same text, ignoring case
  DEGENERATE_OPTION  an option is a give-away such as "all of the above"
"""
import re
from typing import Iterable, List

from app.services.response_parser import CandidateQuestion

MIN_QUESTION_CHARS = 10
MIN_EXPLANATION_CHARS = 20
MIN_OPTION_CHARS = 3

DEGENERATE_PHRASES = [
    "all of the above",
    "none of the above",
    "unknown",
    # Russian output of older prompts
    "все вышеперечисленное",
    "ни один из вариантов",
    "неизвестно",
]

_DEGENERATE_RE = re.compile(
    "|".join(re.escape(p) for p in DEGENERATE_PHRASES), re.IGNORECASE
)


def is_degenerate_option(text: str) -> bool:
    return bool(_DEGENERATE_RE.search(text))


def question_issues(candidate: CandidateQuestion) -> List[str]:
    """Return failure codes for one candidate; empty list means it passes."""
    failures = []

    if len(candidate.text.strip()) < MIN_QUESTION_CHARS:
        failures.append("SHORT_QUESTION")

    if len((candidate.explanation or "").strip()) < MIN_EXPLANATION_CHARS:
        failures.append("SHORT_EXPLANATION")

    texts = [o.text.strip() for o in candidate.options]
    if any(len(t) < MIN_OPTION_CHARS for t in texts):
        failures.append("SHORT_OPTION")

    if len({t.lower() for t in texts}) != len(texts):
        failures.append("DUPLICATE_OPTIONS")

    if any(is_degenerate_option(t) for t in texts):
        failures.append("DEGENERATE_OPTION")

    return failures


def is_acceptable(candidate: CandidateQuestion) -> bool:
    return not question_issues(candidate)


def accepted_only(candidates: Iterable[CandidateQuestion]) -> List[CandidateQuestion]:
    return [c for c in candidates if is_acceptable(c)]
