"""Blueprint contracts describing the project requirements fed to the selector."""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from enum import Enum


class PersistenceType(str, Enum):
    """Data persistence style requested by the project."""
    KV = "kv"
    SQL = "sql"
    BOTH = "both"

    def satisfied_by(self, offered: Optional["PersistenceType"]) -> bool:
        """True if a store offering `offered` can serve this request."""
        if offered is None:
            return False
        if offered == PersistenceType.BOTH:
            return True
        return offered == self


class ComplianceType(str, Enum):
    """Compliance regimes the stack must support."""
    AUDIT_LOG = "audit-log"
    SBOM = "sbom"
    PCI = "pci"
    SOX = "sox"
    HIPAA = "hipaa"


class LanguageMode(str, Enum):
    """Single-language lock; NONE means a polyglot plan."""
    RUST = "rust"
    GO = "go"
    TS = "ts"
    NONE = "none"

    @property
    def language_name(self) -> Optional[str]:
        """Language name as it appears in the rules table, or None for polyglot."""
        return _LANGUAGE_NAMES.get(self)


_LANGUAGE_NAMES = {
    LanguageMode.RUST: "Rust",
    LanguageMode.GO: "Go",
    LanguageMode.TS: "TypeScript",
}


class Constraints(BaseModel):
    """Hard limits a stack must respect."""
    model_config = {"frozen": True}

    monthly_cost_usd_max: Optional[float] = Field(None, ge=0, description="Monthly budget ceiling in USD")
    persistence: Optional[PersistenceType] = Field(None, description="Required persistence style")
    region_allow: Optional[List[str]] = Field(None, description="Regions the stack may run in")
    compliance: Optional[List[ComplianceType]] = Field(None, description="Required compliance regimes")

    @field_validator("region_allow")
    @classmethod
    def normalize_regions(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        """Treat regions as a set: strip, de-duplicate and sort."""
        if value is None:
            return None
        regions = {r.strip() for r in value}
        if "" in regions:
            raise ValueError("region_allow entries must be non-empty")
        return sorted(regions)

    @field_validator("compliance")
    @classmethod
    def normalize_compliance(cls, value: Optional[List[ComplianceType]]) -> Optional[List[ComplianceType]]:
        """Treat compliance tags as a set."""
        if value is None:
            return None
        return sorted(set(value), key=lambda tag: tag.value)


class TrafficProfile(BaseModel):
    """Expected load characteristics."""
    model_config = {"frozen": True, "populate_by_name": True}

    rps_peak: float = Field(..., ge=0, description="Peak requests per second")
    global_: bool = Field(..., alias="global", description="Serves users worldwide")
    latency_sensitive: bool = Field(..., description="Tail latency matters to the product")


class Blueprint(BaseModel):
    """Validated project requirements.

    Immutable once constructed; one instance is owned by a single planning run.
    """
    model_config = {"frozen": True}

    project_name: str = Field(..., description="Project identifier")
    goals: List[str] = Field(..., description="Ordered project goals")
    constraints: Constraints = Field(default_factory=Constraints)
    traffic_profile: TrafficProfile = Field(...)
    prefs: Optional[Dict[str, List[str]]] = Field(None, description="Per-topic ordered candidate preferences")
    single_language_mode: Optional[LanguageMode] = Field(None, description="Lock language-bearing topics to one language")

    @field_validator("project_name")
    @classmethod
    def project_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("project_name cannot be empty")
        return value

    @field_validator("goals")
    @classmethod
    def goals_not_blank(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("goals cannot be empty")
        if any(not goal.strip() for goal in value):
            raise ValueError("goals cannot contain empty entries")
        return value

    @property
    def locked_language(self) -> Optional[str]:
        """Language every language-bearing topic must use, if any."""
        if self.single_language_mode is None:
            return None
        return self.single_language_mode.language_name

    @property
    def is_polyglot(self) -> bool:
        return self.locked_language is None

    def preferences_for(self, topic: str) -> List[str]:
        """Ordered preference list for a topic (empty when none given)."""
        if not self.prefs:
            return []
        return list(self.prefs.get(topic, []))

    def canonical_dict(self) -> dict:
        """JSON-ready form used for hashing; independent of source encoding."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
