"""Assembles per-topic decisions into a StackPlan.

Output schema checks (score range, hash format) belong to the caller; the
assembler only enforces what the engine itself guarantees.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from contracts import (
    Blueprint,
    Candidate,
    Decision,
    Estimated,
    Meta,
    OutputInvariantViolation,
    Service,
    Stack,
    StackPlan,
)
from rules import RulesRepository, WEIGHT_SUM_TOLERANCE

from .hashing import hash_value


UNSPECIFIED = "unspecified"
COST_TOLERANCE = 1e-9


@dataclass(frozen=True)
class TopicResult:
    """A decided topic together with the winning candidate."""
    decision: Decision
    candidate: Candidate
    score: float

    @property
    def topic(self) -> str:
        return self.decision.topic


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "project"


def blueprint_hash(blueprint: Blueprint) -> str:
    """Digest of the canonical blueprint; identical for equivalent YAML and JSON inputs."""
    return hash_value(blueprint.canonical_dict())


def plan_hash(decisions: Sequence[Decision], stack: Stack, seed: Optional[int]) -> str:
    """Digest of decisions, stack and the seed that shaped them.

    `seed` is None when no tie was broken, so seeds that cannot change the
    outcome cannot change the hash either.
    """
    return hash_value({
        "decisions": [d.model_dump(mode="json") for d in decisions],
        "stack": stack.model_dump(mode="json", exclude_none=True),
        "seed": seed,
    })


class PlanAssembler:
    """Builds the final plan and checks its invariants."""

    def __init__(self, rules: RulesRepository, blueprint: Blueprint, seed: int):
        self.rules = rules
        self.blueprint = blueprint
        self.seed = seed

    def assemble(
        self,
        results: Sequence[TopicResult],
        ties_resolved: bool,
        plan_language: Optional[str] = None,
    ) -> StackPlan:
        """Build a StackPlan from decided topics.

        Args:
            results: One result per topic, in rules declaration order
            ties_resolved: Whether the seed decided any ranking
            plan_language: Language chosen for the plan, if any

        Returns:
            The assembled StackPlan; scores are passed through unclamped

        Raises:
            OutputInvariantViolation: If the plan breaks an internal invariant
        """
        self._check_results(results)

        decisions = [r.decision for r in results]
        stack = self.build_stack(results, plan_language)
        estimated = self.estimate(results)

        effective_seed = self.seed if ties_resolved else None
        meta = Meta(
            seed=self.seed,
            blueprint_hash=blueprint_hash(self.blueprint),
            plan_hash=plan_hash(decisions, stack, effective_seed),
        )

        plan = StackPlan(decisions=decisions, stack=stack, estimated=estimated, meta=meta)
        return plan

    def build_stack(self, results: Sequence[TopicResult], plan_language: Optional[str] = None) -> Stack:
        fields: Dict[str, Any] = {r.topic: r.decision.choice for r in results}
        if self.blueprint.is_polyglot:
            fields["services"] = self.build_services(results, plan_language)
        return Stack(**fields)

    def build_services(self, results: Sequence[TopicResult], plan_language: Optional[str] = None) -> List[Service]:
        """One service per decided service topic, in declaration order."""
        project = slugify(self.blueprint.project_name)
        services = []
        for result in results:
            kind = self.rules.service_kind(result.topic)
            if kind is None:
                continue
            candidate = result.candidate
            language = candidate.required_language or plan_language or UNSPECIFIED
            toolchain = self.rules.toolchain(language)
            services.append(Service(
                name=f"{project}-{kind}",
                kind=kind,
                language=language,
                framework=candidate.name,
                runtime=candidate.runtime or (toolchain.runtime if toolchain else UNSPECIFIED),
                build=toolchain.build if toolchain else "",
                tests=toolchain.tests if toolchain else "",
            ))
        return services

    def estimate(self, results: Sequence[TopicResult]) -> Estimated:
        total = math.fsum(r.candidate.monthly_cost_base for r in results)
        ceiling = self.blueprint.constraints.monthly_cost_usd_max

        if ceiling is not None and total > ceiling + COST_TOLERANCE:
            raise OutputInvariantViolation(
                f"Estimated cost ${total:.2f}/month exceeds ceiling ${ceiling:.2f}/month"
            )

        notes = None
        if ceiling is not None:
            notes = [f"Within ${ceiling:.2f}/month ceiling (${max(ceiling - total, 0.0):.2f} headroom)"]
        return Estimated(monthly_cost_usd=round(total, 2), notes=notes)

    def _check_results(self, results: Sequence[TopicResult]) -> None:
        drift = abs(self.rules.weights.total - 1.0)
        if drift > WEIGHT_SUM_TOLERANCE:
            raise OutputInvariantViolation(f"Weights drifted from 1.0 by {drift!r}")

        for result in results:
            decision = result.decision
            if decision.choice != result.candidate.name:
                raise OutputInvariantViolation(f"Decision for {result.topic} does not match its candidate")
            if decision.choice in decision.alternatives:
                raise OutputInvariantViolation(f"Alternatives for {result.topic} include the choice")
            if decision.score != result.score:
                raise OutputInvariantViolation(f"Score for {result.topic} differs from the scorer's value")
