"""Turns a ranking into a Decision with alternatives and reasons."""

from typing import List, Optional

from contracts import Blueprint, Decision
from rules import RulesRepository

from .tie_breaker import Ranking, RankedCandidate


METRIC_REASONS = {
    "quality": "High engineering quality",
    "slo": "Reliably meets service-level objectives",
    "cost": "Cost-efficient to run",
    "security": "Strong security posture",
    "ops": "Low operational burden",
}

LATENCY_SLO_THRESHOLD = 0.85


class DecisionBuilder:
    """Builds per-topic decisions from rankings."""

    def __init__(self, rules: RulesRepository, blueprint: Blueprint):
        self.rules = rules
        self.blueprint = blueprint
        self.max_alternatives = rules.options.max_alternatives

    def build(self, ranking: Ranking, plan_language: Optional[str] = None) -> Decision:
        """Pick the winner of a ranking.

        Args:
            ranking: Non-empty ranking for one topic
            plan_language: Language the plan is built around, if already decided

        Returns:
            Decision whose score is the winner's scorer total
        """
        if not ranking.ranked:
            raise ValueError(f"Cannot decide {ranking.topic}: ranking is empty")

        winner = ranking.winner
        alternatives = [entry.name for entry in ranking.ranked[1:1 + self.max_alternatives]]
        return Decision(
            topic=ranking.topic,
            choice=winner.name,
            reasons=self.explain(winner, plan_language),
            alternatives=alternatives,
            score=winner.score,
        )

    def explain(self, winner: RankedCandidate, plan_language: Optional[str] = None) -> List[str]:
        """Reasons: the two largest weighted contributions, then context."""
        reasons = [
            f"{METRIC_REASONS.get(metric, metric)} (weighted {metric} contribution {value:.3f})"
            for metric, value in winner.breakdown.top_metrics(2)
        ]

        candidate = winner.candidate
        topic = candidate.topic

        if plan_language and candidate.required_language == plan_language and self.rules.is_language_topic(topic):
            reasons.append(f"Compatible with {plan_language} language")

        if (
            self.blueprint.traffic_profile.latency_sensitive
            and candidate.metrics.get("slo") >= LATENCY_SLO_THRESHOLD
        ):
            reasons.append("Excellent performance for latency-sensitive workload")

        tags = [tag.value for tag in self.blueprint.constraints.compliance or []]
        if tags and self.rules.required_features(topic, tags):
            reasons.append(f"Covers {', '.join(t.upper() for t in tags)} compliance requirements")

        if candidate.name in self.blueprint.preferences_for(topic):
            reasons.append("Listed in project preferences")

        if winner.breakdown.penalty > 0:
            reasons.append(f"Adds {self.rules.language_of(candidate)} to the plan's toolchains")

        if candidate.notes:
            reasons.append(candidate.notes[0])

        return reasons
