"""Rules-table contracts: scoring weights, candidates and selection knobs."""

import math

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Tuple

from .blueprint_contracts import PersistenceType


# Declaration order doubles as the tie order when ranking metric contributions.
METRIC_NAMES: Tuple[str, ...] = ("quality", "slo", "cost", "security", "ops")

WILDCARD_REGIONS = frozenset({"*", "global"})


class Weights(BaseModel):
    """Metric weights; must sum to 1.0 (checked by the rules loader)."""
    model_config = {"frozen": True}

    quality: float = Field(..., ge=0.0, le=1.0)
    slo: float = Field(..., ge=0.0, le=1.0)
    cost: float = Field(..., ge=0.0, le=1.0)
    security: float = Field(..., ge=0.0, le=1.0)
    ops: float = Field(..., ge=0.0, le=1.0)

    @property
    def total(self) -> float:
        return math.fsum(getattr(self, name) for name in METRIC_NAMES)

    def get(self, metric: str) -> float:
        return getattr(self, metric)


class Metrics(BaseModel):
    """Per-candidate metric values in [0, 1]. Absent metrics read as 0."""
    model_config = {"frozen": True}

    quality: Optional[float] = Field(None, ge=0.0, le=1.0)
    slo: Optional[float] = Field(None, ge=0.0, le=1.0)
    cost: Optional[float] = Field(None, ge=0.0, le=1.0)
    security: Optional[float] = Field(None, ge=0.0, le=1.0)
    ops: Optional[float] = Field(None, ge=0.0, le=1.0)

    def get(self, metric: str) -> float:
        value = getattr(self, metric, None)
        return 0.0 if value is None else value

    def missing(self) -> List[str]:
        return [name for name in METRIC_NAMES if getattr(self, name) is None]


class CandidateRequirements(BaseModel):
    model_config = {"frozen": True}

    language: Optional[str] = None


class Candidate(BaseModel):
    """A technology option for one topic."""
    model_config = {"frozen": True}

    topic: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, description="Unique within its topic")
    requires: Optional[CandidateRequirements] = None
    persistence: Optional[PersistenceType] = Field(None, description="Persistence style offered (database topic)")
    metrics: Metrics = Field(...)
    regions: Tuple[str, ...] = Field(..., description="Supported regions; '*' or 'global' match anywhere")
    monthly_cost_base: float = Field(0.0, ge=0.0, description="Minimum monthly cost in USD")
    notes: Tuple[str, ...] = Field(default_factory=tuple)
    compliance: Tuple[str, ...] = Field(default_factory=tuple, description="Compliance capabilities offered")
    runtime: Optional[str] = Field(None, description="Runtime override for service entries")

    @field_validator("compliance")
    @classmethod
    def sort_capabilities(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(sorted(set(value)))

    @property
    def required_language(self) -> Optional[str]:
        return self.requires.language if self.requires else None

    @property
    def is_region_agnostic(self) -> bool:
        return any(region in WILDCARD_REGIONS for region in self.regions)


class SelectionOptions(BaseModel):
    """Engine tuning knobs carried by the rules table."""
    model_config = {"frozen": True}

    max_alternatives: int = Field(3, ge=0, description="Alternatives listed per decision")
    tie_epsilon: float = Field(1e-9, ge=0.0, description="Scores closer than this are ties")
    polyglot_penalty: float = Field(0.02, ge=0.0, description="Score cost per extra language in a polyglot plan")


class Toolchain(BaseModel):
    """How services written in a language are run, built and tested."""
    model_config = {"frozen": True}

    runtime: str = Field(..., min_length=1)
    build: str = ""
    tests: str = ""


class ComplianceRequirement(BaseModel):
    """Capabilities a compliance tag demands, and the topics that must offer them."""
    model_config = {"frozen": True}

    required_features: Tuple[str, ...] = Field(default_factory=tuple)
    topics: Optional[Tuple[str, ...]] = Field(None, description="Defaults to the table's compliance_topics")


class RulesDocument(BaseModel):
    """Raw shape of a rules table before it becomes a RulesRepository.

    Candidates stay loosely typed here; the repository builder validates
    each one so errors can name the topic and candidate at fault.
    """
    model_config = {"frozen": True, "extra": "forbid"}

    version: int = 1
    weights: Weights
    selection: SelectionOptions = Field(default_factory=SelectionOptions)
    language_topic: Optional[str] = Field("language", description="Topic whose candidates are languages")
    language_topics: Tuple[str, ...] = ("language", "backend")
    persistence_topic: Optional[str] = "database"
    compliance_topics: Tuple[str, ...] = ("database", "queue", "infra")
    service_topics: Dict[str, str] = Field(default_factory=dict, description="Topic -> service kind")
    toolchains: Dict[str, Toolchain] = Field(default_factory=dict)
    compliance_requirements: Dict[str, ComplianceRequirement] = Field(default_factory=dict)
    candidates: Dict[str, List[Dict[str, Any]]] = Field(..., description="Topic -> candidates, in declaration order")
