"""
Response Parser: turns free-form generator output into candidate questions.

Grammar (one block per question, markdown bold/heading decoration tolerated):

    response  := preamble? block+
    block     := MARKER question_line option_line{4} answer_line explanation? type?
    MARKER    := "Question" <n> ("." | ":" | ")")        at line start
    option    := <A-D> (")" | ".") text
    answer    := "Answer:" <A-D>
    explanation := "Explanation:" text (continues until "Type:" or block end)
    type      := "Type:" text

parse_segment() is the per-block contract: it returns either a
CandidateQuestion or a Discard carrying the reason. Discards are dropped, never
raised: one malformed block must not sink the rest of the response.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Union

from app.models.test import OptionRecord, QuestionRecord

logger = logging.getLogger(__name__)

# Russian keywords are accepted too: older prompts asked for Russian output.
_QUESTION_MARKER_RE = re.compile(
    r"^[ \t]*[#*]*[ \t]*(?:Question|Вопрос)[ \t]+(\d+)[ \t]*[.:)][ \t]*\**",
    re.IGNORECASE | re.MULTILINE,
)
_ANSWER_RE = re.compile(
    r"^\**\s*(?:Correct answer|Answer|Ответ)\s*\**\s*[:\-]\s*\**\s*\(?([A-Da-d])\b",
    re.IGNORECASE,
)
_EXPLANATION_RE = re.compile(
    r"^\**\s*(?:Explanation|Объяснение)\s*\**\s*:\s*\**\s*(.*)$", re.IGNORECASE
)
_TYPE_RE = re.compile(r"^\**\s*(?:Type|Тип)\s*\**\s*:\s*\**\s*(.*)$", re.IGNORECASE)
_OPTION_RE = re.compile(r"^\**\s*([A-Da-d])\s*[).]\s*\**\s*(.+)$")

# Discard reasons
NO_ANSWER_MARKER = "no_answer_marker"
EMPTY_QUESTION = "empty_question"
WRONG_OPTION_COUNT = "wrong_option_count"
DUPLICATE_OPTION_LETTER = "duplicate_option_letter"


@dataclass(frozen=True)
class CandidateQuestion:
    """A parsed but not yet validated question."""
    question_id: str
    text: str
    options: tuple[OptionRecord, ...]
    correct_option_id: str
    explanation: str = ""
    type: str | None = None

    def to_question(self, question_id: str) -> QuestionRecord:
        return QuestionRecord(
            question_id=question_id,
            text=self.text,
            options=list(self.options),
            correct_option_id=self.correct_option_id,
            explanation=self.explanation,
            type=self.type,
        )


@dataclass(frozen=True)
class Discard:
    segment_index: int
    reason: str


SegmentResult = Union[CandidateQuestion, Discard]


@dataclass
class ParseReport:
    candidates: list[CandidateQuestion] = field(default_factory=list)
    discarded: list[Discard] = field(default_factory=list)


def _clean(text: str) -> str:
    return text.strip().strip("*").strip()


def split_segments(response: str) -> list[str]:
    """Split a response on question markers. Text before the first marker is dropped."""
    markers = list(_QUESTION_MARKER_RE.finditer(response or ""))
    segments = []
    for i, m in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(response)
        segments.append(response[m.end():end])
    return segments


def parse_segment(segment: str, index: int) -> SegmentResult:
    """Parse one question block. `index` is 1-based and becomes the provisional id."""
    lines = [ln.strip() for ln in segment.splitlines()]

    answer_at = None
    correct = None
    for i, line in enumerate(lines):
        if _EXPLANATION_RE.match(line):
            break  # an answer after the explanation does not count
        m = _ANSWER_RE.match(line)
        if m:
            answer_at, correct = i, m.group(1).lower()
            break
    if answer_at is None:
        return Discard(index, NO_ANSWER_MARKER)

    head = [ln for ln in lines[:answer_at] if ln]
    if not head or not _clean(head[0]):
        return Discard(index, EMPTY_QUESTION)
    question_text = _clean(head[0])

    options: list[OptionRecord] = []
    for line in head[1:]:
        m = _OPTION_RE.match(line)
        if m and _clean(m.group(2)):
            options.append(OptionRecord(option_id=m.group(1).lower(), text=_clean(m.group(2))))
    if len(options) != 4:
        return Discard(index, WRONG_OPTION_COUNT)
    if len({o.option_id for o in options}) != 4:
        return Discard(index, DUPLICATE_OPTION_LETTER)

    explanation_parts: list[str] = []
    qtype = None
    in_explanation = False
    for line in lines[answer_at + 1:]:
        type_match = _TYPE_RE.match(line)
        if type_match:
            qtype = _clean(type_match.group(1)) or None
            break
        exp_match = _EXPLANATION_RE.match(line)
        if exp_match:
            in_explanation = True
            explanation_parts.append(exp_match.group(1))
        elif in_explanation and line:
            explanation_parts.append(line)

    return CandidateQuestion(
        question_id=f"q{index}",
        text=question_text,
        options=tuple(sorted(options, key=lambda o: o.option_id)),
        correct_option_id=correct,
        explanation=_clean(" ".join(explanation_parts)),
        type=qtype,
    )


def parse_response_report(response: str) -> ParseReport:
    report = ParseReport()
    for index, segment in enumerate(split_segments(response), 1):
        result = parse_segment(segment, index)
        if isinstance(result, Discard):
            logger.debug("[response_parser] discarded block %d: %s", index, result.reason)
            report.discarded.append(result)
        else:
            report.candidates.append(result)
    return report


def parse_response(response: str, expected_count: int | None = None) -> list[CandidateQuestion]:
    """Return every well-formed candidate. expected_count is only used for logging."""
    report = parse_response_report(response)
    if expected_count is not None and len(report.candidates) != expected_count:
        logger.info(
            "[response_parser] parsed %d of %d expected questions (%d blocks discarded)",
            len(report.candidates), expected_count, len(report.discarded),
        )
    return report.candidates
