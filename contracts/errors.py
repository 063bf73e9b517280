"""Error taxonomy shared by the rules loader, the selector and the CLI.

Each selection failure carries the process exit code the CLI reports for it.
"""

from pydantic import BaseModel, Field
from typing import List, Sequence


class CandidateViolation(BaseModel):
    """Why a single candidate was filtered out."""
    model_config = {"frozen": True}

    candidate: str
    rule: str = Field(..., description="region, language, persistence, compliance or cost_ceiling")
    detail: str


class TopicFailure(BaseModel):
    """A topic left with no eligible candidate."""
    model_config = {"frozen": True}

    topic: str
    violations: List[CandidateViolation] = Field(default_factory=list)

    def summary(self) -> str:
        if not self.violations:
            return f"{self.topic}: no candidates"
        rules = sorted({v.rule for v in self.violations})
        return f"{self.topic}: rejected by {', '.join(rules)}"


class ConfigError(Exception):
    """The rules table is malformed. Fatal at startup."""


class SelectionError(Exception):
    """Base class for failures raised by `select`."""

    exit_code = 1


class InvalidSeed(SelectionError):
    """The tie-break seed is not an integer in [0, 2^64)."""

    exit_code = 1


class NoEligibleCandidate(SelectionError):
    """One or more topics ended with zero eligible candidates."""

    exit_code = 3

    def __init__(self, failures: Sequence[TopicFailure]):
        self.failures = list(failures)
        topics = ", ".join(f.topic for f in self.failures)
        super().__init__(f"No eligible candidate for topics: {topics}")

    @property
    def topics(self) -> List[str]:
        return [f.topic for f in self.failures]


class OutputInvariantViolation(SelectionError):
    """The assembled plan breaks its schema or an internal invariant."""

    exit_code = 2


class BlueprintValidationError(Exception):
    """The input blueprint could not be read, parsed or validated."""

    exit_code = 1
