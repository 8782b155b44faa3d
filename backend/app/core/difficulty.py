"""
Difficulty catalog: tier → question count, time limit and complexity.

The catalog is an immutable value. Build it once with default_catalog() and
pass it into the prompt builder / generator; nothing reads it as a global.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Literal, Mapping

DifficultyTier = Literal["low", "mid", "high"]


@dataclass(frozen=True)
class DifficultyProfile:
    tier: str
    question_count: int
    time_limit_seconds: int
    complexity_descriptor: str
    focus_keywords: tuple[str, ...] = ()

    def __post_init__(self):
        if self.question_count <= 0:
            raise ValueError(f"question_count must be positive for tier '{self.tier}'")
        if self.time_limit_seconds <= 0:
            raise ValueError(f"time_limit_seconds must be positive for tier '{self.tier}'")


class DifficultyCatalog:
    """Read-only lookup of DifficultyProfile by tier."""

    def __init__(self, profiles: Mapping[str, DifficultyProfile]):
        self._profiles = MappingProxyType(dict(profiles))

    def get(self, tier: str) -> DifficultyProfile | None:
        return self._profiles.get(tier)

    def __getitem__(self, tier: str) -> DifficultyProfile:
        return self._profiles[tier]

    def __contains__(self, tier: object) -> bool:
        return tier in self._profiles

    def __iter__(self) -> Iterator[str]:
        return iter(self._profiles)

    def tiers(self) -> list[str]:
        return list(self._profiles)


_DEFAULT_PROFILES = (
    DifficultyProfile(
        tier="low",
        question_count=15,
        time_limit_seconds=1800,
        complexity_descriptor="basic concepts and simple tasks",
        focus_keywords=("fundamentals", "definitions", "simple", "basic"),
    ),
    DifficultyProfile(
        tier="mid",
        question_count=25,
        time_limit_seconds=2700,
        complexity_descriptor="applying knowledge and analysis",
        focus_keywords=("application", "analysis", "comparison", "problem solving"),
    ),
    DifficultyProfile(
        tier="high",
        question_count=30,
        time_limit_seconds=3600,
        complexity_descriptor="synthesis, evaluation and complex tasks",
        focus_keywords=("evaluation", "synthesis", "complex", "critical analysis"),
    ),
)


def default_catalog() -> DifficultyCatalog:
    return DifficultyCatalog({p.tier: p for p in _DEFAULT_PROFILES})
