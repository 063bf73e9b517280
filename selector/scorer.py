"""Weighted multi-criteria scoring.

    score = sum(weight_i * metric_i) - penalty

Metrics absent from a candidate count as 0. Scores are neither clamped nor
re-normalised; keeping them inside [0, 1] is the rules table's job.
"""

import math
from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Tuple

from contracts import METRIC_NAMES, Blueprint, Candidate, Weights


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-metric weighted contributions behind one candidate's score."""
    candidate: str
    contributions: Tuple[Tuple[str, float], ...]
    penalty: float
    total: float

    def contribution(self, metric: str) -> float:
        for name, value in self.contributions:
            if name == metric:
                return value
        return 0.0

    def top_metrics(self, count: int = 2) -> List[Tuple[str, float]]:
        """Largest contributions first; equal values keep metric declaration order."""
        order = {name: index for index, name in enumerate(METRIC_NAMES)}
        ranked = sorted(self.contributions, key=lambda item: (-item[1], order.get(item[0], len(order))))
        return ranked[:count]


def weighted_contributions(candidate: Candidate, weights: Weights) -> Tuple[Tuple[str, float], ...]:
    return tuple(
        (name, weights.get(name) * candidate.metrics.get(name))
        for name in METRIC_NAMES
    )


def polyglot_penalty(
    language: Optional[str],
    plan_languages: AbstractSet[str],
    per_language: float,
) -> float:
    """Toolchain penalty for bringing a new language into a polyglot plan.

    Zero when the candidate brings no language or one already in the plan;
    otherwise grows with the number of distinct languages the plan would hold.
    """
    if language is None or language in plan_languages:
        return 0.0
    return per_language * len(plan_languages)


class Scorer:
    """Scores candidates under a fixed set of weights."""

    def __init__(self, weights: Weights, per_language_penalty: float = 0.0):
        self.weights = weights
        self.per_language_penalty = per_language_penalty

    def score(
        self,
        candidate: Candidate,
        blueprint: Blueprint,
        language: Optional[str] = None,
        plan_languages: AbstractSet[str] = frozenset(),
    ) -> ScoreBreakdown:
        """Score one candidate.

        Args:
            candidate: Candidate to score
            blueprint: Blueprint the plan is built for
            language: Language the candidate would add to the plan
            plan_languages: Languages already present in the plan

        Returns:
            ScoreBreakdown whose `total` is the candidate's score
        """
        contributions = weighted_contributions(candidate, self.weights)
        penalty = 0.0
        if blueprint.is_polyglot:
            penalty = polyglot_penalty(language, plan_languages, self.per_language_penalty)
        total = math.fsum(value for _, value in contributions) - penalty
        return ScoreBreakdown(
            candidate=candidate.name,
            contributions=contributions,
            penalty=penalty,
            total=total,
        )
