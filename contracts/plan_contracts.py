"""Stack plan contracts: the selector's output."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class Decision(BaseModel):
    """The chosen candidate for one topic."""
    model_config = {"frozen": True}

    topic: str = Field(..., min_length=1)
    choice: str = Field(..., min_length=1, description="Name of the winning candidate")
    reasons: List[str] = Field(default_factory=list, description="Human-readable justification")
    alternatives: List[str] = Field(default_factory=list, description="Runner-up names, best first")
    score: float = Field(..., description="Weighted score of the choice")


class Service(BaseModel):
    """One deployable unit in a polyglot plan."""
    model_config = {"frozen": True}

    name: str
    kind: str
    language: str
    framework: str
    runtime: str
    build: str = ""
    tests: str = ""


class Stack(BaseModel):
    """Resolved stack.

    Each decided topic appears as a flat `topic: choice` field; polyglot
    plans additionally carry `services`.
    """
    model_config = {"frozen": True, "extra": "allow"}

    services: Optional[List[Service]] = None

    @property
    def components(self) -> Dict[str, str]:
        """Topic -> choice mapping."""
        return dict(self.model_extra or {})

    def get(self, topic: str) -> Optional[str]:
        return (self.model_extra or {}).get(topic)


class Estimated(BaseModel):
    model_config = {"frozen": True}

    monthly_cost_usd: float = Field(..., ge=0)
    notes: Optional[List[str]] = None


class Meta(BaseModel):
    model_config = {"frozen": True}

    seed: int = Field(..., ge=0, lt=2 ** 64)
    blueprint_hash: str
    plan_hash: str


class StackPlan(BaseModel):
    """Complete selector output; immutable after assembly."""
    model_config = {"frozen": True}

    decisions: List[Decision]
    stack: Stack
    estimated: Estimated
    meta: Meta

    def decision_for(self, topic: str) -> Optional[Decision]:
        for decision in self.decisions:
            if decision.topic == topic:
                return decision
        return None

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
