"""Constraint filter: removes candidates a blueprint rules out.

Every rule is applied independently and a candidate is dropped if any of
them fails. The first failing rule, in the order below, is reported so the
CLI can explain why a topic ran dry.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from contracts import Blueprint, Candidate, CandidateViolation, TopicFailure
from rules import RulesRepository


RULE_REGION = "region"
RULE_LANGUAGE = "language"
RULE_PERSISTENCE = "persistence"
RULE_COMPLIANCE = "compliance"
RULE_COST_CEILING = "cost_ceiling"

# Absorbs float noise when a candidate exactly fills the remaining budget.
COST_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Eligibility:
    """Outcome of checking one candidate."""
    eligible: bool
    rule: Optional[str] = None
    detail: str = ""

    def as_violation(self, candidate: Candidate) -> CandidateViolation:
        return CandidateViolation(candidate=candidate.name, rule=self.rule or "", detail=self.detail)


ELIGIBLE = Eligibility(eligible=True)


@dataclass
class FilterOutcome:
    """Eligible candidates of one topic and why the others were dropped."""
    topic: str
    eligible: List[Candidate] = field(default_factory=list)
    violations: List[CandidateViolation] = field(default_factory=list)

    @property
    def cheapest_cost(self) -> float:
        if not self.eligible:
            return 0.0
        return min(c.monthly_cost_base for c in self.eligible)

    def failure(self) -> Optional[TopicFailure]:
        if self.eligible:
            return None
        return TopicFailure(topic=self.topic, violations=list(self.violations))


class ConstraintFilter:
    """Applies a blueprint's constraints to rules-table candidates."""

    def __init__(self, rules: RulesRepository, blueprint: Blueprint):
        self.rules = rules
        self.blueprint = blueprint
        constraints = blueprint.constraints
        self._allowed_regions = set(constraints.region_allow) if constraints.region_allow is not None else None
        self._compliance_tags = [tag.value for tag in constraints.compliance or []]

    def check(self, candidate: Candidate, remaining_budget: Optional[float] = None) -> Eligibility:
        """Check one candidate against every constraint.

        Args:
            candidate: Candidate to check
            remaining_budget: Spend left for the candidate's topic; None
                skips the cost ceiling rule

        Returns:
            Eligibility naming the first violated rule, if any
        """
        for verdict in (
            self._check_region(candidate),
            self._check_language(candidate),
            self._check_persistence(candidate),
            self._check_compliance(candidate),
            self._check_cost(candidate, remaining_budget),
        ):
            if not verdict.eligible:
                return verdict
        return ELIGIBLE

    def filter_static(self, topic: str) -> FilterOutcome:
        """Apply every rule except the cost ceiling to a topic's candidates."""
        return self._partition(topic, self.rules.candidates_for(topic), None)

    def apply_cost_ceiling(self, outcome: FilterOutcome, remaining_budget: float) -> FilterOutcome:
        """Drop candidates of an already-filtered topic that exceed the remaining budget."""
        narrowed = self._partition(outcome.topic, outcome.eligible, remaining_budget)
        narrowed.violations = list(outcome.violations) + narrowed.violations
        return narrowed

    def _partition(
        self,
        topic: str,
        candidates: Sequence[Candidate],
        remaining_budget: Optional[float],
    ) -> FilterOutcome:
        outcome = FilterOutcome(topic=topic)
        for candidate in candidates:
            verdict = (
                self._check_cost(candidate, remaining_budget)
                if remaining_budget is not None
                else self.check(candidate)
            )
            if verdict.eligible:
                outcome.eligible.append(candidate)
            else:
                outcome.violations.append(verdict.as_violation(candidate))
        return outcome

    def _check_region(self, candidate: Candidate) -> Eligibility:
        if self._allowed_regions is None or candidate.is_region_agnostic:
            return ELIGIBLE
        if self._allowed_regions.intersection(candidate.regions):
            return ELIGIBLE
        return Eligibility(
            False,
            RULE_REGION,
            f"regions {', '.join(candidate.regions) or 'none'} outside allowed {', '.join(sorted(self._allowed_regions)) or 'none'}",
        )

    def _check_language(self, candidate: Candidate) -> Eligibility:
        locked = self.blueprint.locked_language
        if locked is None or not self.rules.is_language_topic(candidate.topic):
            return ELIGIBLE
        language = self.rules.language_of(candidate)
        if language == locked:
            return ELIGIBLE
        return Eligibility(False, RULE_LANGUAGE, f"requires {language or 'no language'}, plan is locked to {locked}")

    def _check_persistence(self, candidate: Candidate) -> Eligibility:
        requested = self.blueprint.constraints.persistence
        if requested is None or candidate.topic != self.rules.persistence_topic:
            return ELIGIBLE
        if requested.satisfied_by(candidate.persistence):
            return ELIGIBLE
        offered = candidate.persistence.value if candidate.persistence else "none"
        return Eligibility(False, RULE_PERSISTENCE, f"offers {offered} persistence, {requested.value} requested")

    def _check_compliance(self, candidate: Candidate) -> Eligibility:
        if not self._compliance_tags:
            return ELIGIBLE
        required = self.rules.required_features(candidate.topic, self._compliance_tags)
        missing = sorted(required.difference(candidate.compliance))
        if not missing:
            return ELIGIBLE
        return Eligibility(False, RULE_COMPLIANCE, f"missing compliance features: {', '.join(missing)}")

    def _check_cost(self, candidate: Candidate, remaining_budget: Optional[float]) -> Eligibility:
        if remaining_budget is None:
            return ELIGIBLE
        if candidate.monthly_cost_base <= remaining_budget + COST_TOLERANCE:
            return ELIGIBLE
        return Eligibility(
            False,
            RULE_COST_CEILING,
            f"costs ${candidate.monthly_cost_base:.2f}/month, ${max(remaining_budget, 0.0):.2f} left in budget",
        )
