"""Selection engine: blueprint + rules + seed -> StackPlan.

Topics are evaluated one at a time in rules declaration order. Order
matters for two things only: the cost ceiling, which each topic spends
against after earlier choices, and the polyglot penalty, which depends on
the languages earlier choices brought in. Everything else about a topic is
independent of its neighbours.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from contracts import Blueprint, Candidate, InvalidSeed, NoEligibleCandidate, StackPlan, TopicFailure
from rules import RulesRepository

from .budget import CostBudget
from .constraint_filter import ConstraintFilter, FilterOutcome
from .decision_builder import DecisionBuilder
from .plan_assembler import PlanAssembler, TopicResult
from .scorer import Scorer
from .tie_breaker import Ranking, rank_candidates


MAX_SEED = 2 ** 64


@dataclass
class TopicEvaluation:
    """Everything the engine learned about one topic."""
    topic: str
    outcome: FilterOutcome
    remaining_budget: Optional[float] = None
    preferred_only: bool = False
    ranking: Optional[Ranking] = None

    @property
    def failed(self) -> bool:
        return self.ranking is None


@dataclass
class SelectionTrace:
    """Per-topic record of a selection run, for reporting."""
    evaluations: List[TopicEvaluation] = field(default_factory=list)
    budget_manifest: Dict[str, Any] = field(default_factory=dict)
    plan_languages: List[str] = field(default_factory=list)

    @property
    def ties_resolved(self) -> bool:
        return any(e.ranking is not None and e.ranking.ties_resolved for e in self.evaluations)

    @property
    def failures(self) -> List[TopicFailure]:
        return [e.outcome.failure() or TopicFailure(topic=e.topic) for e in self.evaluations if e.failed]


@dataclass
class SelectionResult:
    plan: StackPlan
    trace: SelectionTrace


class SelectionEngine:
    """Runs one selection over a blueprint. Holds no state beyond the run."""

    def __init__(self, rules: RulesRepository, blueprint: Blueprint, seed: int):
        if not isinstance(seed, int) or isinstance(seed, bool) or not 0 <= seed < MAX_SEED:
            raise InvalidSeed(f"seed must be an integer in [0, 2^64), got {seed!r}")

        self.rules = rules
        self.blueprint = blueprint
        self.seed = seed
        self.filter = ConstraintFilter(rules, blueprint)
        self.scorer = Scorer(rules.weights, rules.options.polyglot_penalty)
        self.builder = DecisionBuilder(rules, blueprint)

    def run(self) -> SelectionResult:
        """Evaluate every topic and assemble the plan.

        Raises:
            NoEligibleCandidate: If any topic ends with zero eligible candidates
            OutputInvariantViolation: If the assembled plan breaks an invariant
        """
        rules = self.rules
        static = {topic: self.filter.filter_static(topic) for topic in rules.topics}
        budget = CostBudget(
            self.blueprint.constraints.monthly_cost_usd_max,
            {topic: outcome.cheapest_cost for topic, outcome in static.items()},
        )

        trace = SelectionTrace()
        results: List[TopicResult] = []
        plan_languages: Set[str] = set()
        plan_language = self.blueprint.locked_language

        for topic in rules.topics:
            evaluation = TopicEvaluation(topic=topic, outcome=static[topic])
            trace.evaluations.append(evaluation)

            if not budget.is_unbounded:
                evaluation.remaining_budget = budget.remaining_for(topic)
                evaluation.outcome = self.filter.apply_cost_ceiling(static[topic], evaluation.remaining_budget)

            if not evaluation.outcome.eligible:
                budget.commit(topic, budget.reserved_for(topic))
                continue

            pool = self._apply_preferences(topic, evaluation.outcome.eligible)
            evaluation.preferred_only = len(pool) < len(evaluation.outcome.eligible)

            scored = [
                (candidate, self.scorer.score(candidate, self.blueprint, rules.language_of(candidate), plan_languages))
                for candidate in pool
            ]
            ranking = rank_candidates(topic, scored, self.seed, rules.options.tie_epsilon)
            evaluation.ranking = ranking

            winner = ranking.winner
            decision = self.builder.build(ranking, plan_language)
            results.append(TopicResult(decision=decision, candidate=winner.candidate, score=winner.score))
            budget.commit(topic, winner.candidate.monthly_cost_base)

            language = rules.language_of(winner.candidate)
            if language:
                plan_languages.add(language)
            if topic == rules.language_topic:
                plan_language = winner.name

        trace.budget_manifest = budget.generate_manifest()
        trace.plan_languages = sorted(plan_languages)

        failures = trace.failures
        if failures:
            raise NoEligibleCandidate(failures)

        assembler = PlanAssembler(rules, self.blueprint, self.seed)
        plan = assembler.assemble(results, trace.ties_resolved, plan_language)
        return SelectionResult(plan=plan, trace=trace)

    def _apply_preferences(self, topic: str, eligible: List[Candidate]) -> List[Candidate]:
        """Narrow to preferred candidates when any of them survived filtering."""
        preferred = set(self.blueprint.preferences_for(topic))
        if not preferred:
            return list(eligible)
        narrowed = [c for c in eligible if c.name in preferred]
        return narrowed or list(eligible)


def evaluate(blueprint: Blueprint, rules: RulesRepository, seed: int) -> SelectionResult:
    """Run a selection and keep the per-topic trace."""
    return SelectionEngine(rules, blueprint, seed).run()


def select(blueprint: Blueprint, rules: RulesRepository, seed: int) -> StackPlan:
    """Pure, deterministic stack selection.

    Args:
        blueprint: Validated project requirements
        rules: Immutable rules table
        seed: Tie-break seed in [0, 2^64)

    Returns:
        The stack plan; identical inputs always give an identical plan

    Raises:
        InvalidSeed: If the seed is out of range
        NoEligibleCandidate: If a topic has no eligible candidate
        OutputInvariantViolation: If the assembled plan is invalid
    """
    return evaluate(blueprint, rules, seed).plan
