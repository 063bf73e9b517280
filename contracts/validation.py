"""Post-selection checks on a StackPlan.

A failure here is an engine defect, never user error.
"""

import math
import re
from typing import List

from .errors import OutputInvariantViolation
from .plan_contracts import StackPlan


HASH_PATTERN = re.compile(r"^sha256:[0-9a-f]{64}$")


def collect_plan_problems(plan: StackPlan) -> List[str]:
    """Return every schema problem found in `plan` (empty when valid)."""
    problems: List[str] = []

    if plan.estimated.monthly_cost_usd < 0 or not math.isfinite(plan.estimated.monthly_cost_usd):
        problems.append("monthly_cost_usd must be a non-negative number")

    seen_topics = set()
    for decision in plan.decisions:
        if decision.topic in seen_topics:
            problems.append(f"Duplicate decision for topic {decision.topic}")
        seen_topics.add(decision.topic)

        if not math.isfinite(decision.score) or not 0.0 <= decision.score <= 1.0:
            problems.append(f"Score for {decision.topic} must be between 0 and 1")
        if decision.choice in decision.alternatives:
            problems.append(f"Alternatives for {decision.topic} include the choice")
        if len(set(decision.alternatives)) != len(decision.alternatives):
            problems.append(f"Alternatives for {decision.topic} repeat a candidate")
        if not decision.reasons:
            problems.append(f"Decision for {decision.topic} has no reasons")
        if plan.stack.get(decision.topic) != decision.choice:
            problems.append(f"Stack field {decision.topic} does not match its decision")

    for service in plan.stack.services or []:
        for field in ("name", "kind", "language", "framework", "runtime"):
            if not getattr(service, field):
                problems.append(f"Service {service.name or '?'} is missing {field}")

    for field in ("blueprint_hash", "plan_hash"):
        if not HASH_PATTERN.match(getattr(plan.meta, field)):
            problems.append(f"meta.{field} is not a sha256 digest")

    return problems


def validate_stack_plan(plan: StackPlan) -> StackPlan:
    """Raise OutputInvariantViolation if `plan` fails the output schema."""
    problems = collect_plan_problems(plan)
    if problems:
        raise OutputInvariantViolation("Output schema validation failed: " + "; ".join(problems))
    return plan
