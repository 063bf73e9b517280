"""Monthly cost ceiling tracking for a single selection run.

Topics are walked in declaration order. Each topic may spend whatever the
ceiling leaves after the choices already committed and the cheapest
eligible option reserved for every topic still to come, so the final plan
never exceeds the ceiling.
"""

import math
from typing import Any, Dict, Mapping, Optional


class CostBudget:
    """Running cost ledger against an optional monthly ceiling."""

    def __init__(self, max_cost_usd: Optional[float], reserved: Mapping[str, float]):
        """Initialize the ledger.

        Args:
            max_cost_usd: Ceiling in USD; None means unbounded
            reserved: Topic -> cheapest cost among candidates that pass
                every non-cost constraint, in declaration order
        """
        self.max_cost_usd = max_cost_usd
        self._reserved: Dict[str, float] = dict(reserved)
        self._committed: Dict[str, float] = {}

    @property
    def is_unbounded(self) -> bool:
        return self.max_cost_usd is None

    @property
    def total_committed_usd(self) -> float:
        return math.fsum(self._committed.values())

    def reserved_for(self, topic: str) -> float:
        return self._reserved.get(topic, 0.0)

    def remaining_for(self, topic: str) -> float:
        """Most a candidate for `topic` may cost without starving later topics."""
        if self.max_cost_usd is None:
            return math.inf
        pending = math.fsum(
            cost for t, cost in self._reserved.items()
            if t != topic and t not in self._committed
        )
        return self.max_cost_usd - self.total_committed_usd - pending

    def commit(self, topic: str, cost_usd: float) -> None:
        """Record the cost of the option taken for a topic."""
        if topic in self._committed:
            raise ValueError(f"Cost for {topic} already committed")
        self._committed[topic] = cost_usd

    def generate_manifest(self) -> Dict[str, Any]:
        """Summarise committed spend per topic."""
        total = self.total_committed_usd
        return {
            "summary": {
                "total_cost_usd": round(total, 2),
                "max_budget_usd": self.max_cost_usd,
                "budget_used_percent": round(
                    (total / self.max_cost_usd * 100) if self.max_cost_usd else 0, 1
                ),
            },
            "by_topic": {t: round(c, 2) for t, c in self._committed.items()},
        }
