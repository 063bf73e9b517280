"""Pydantic contracts for the Runeforge system.

Every value crossing a component boundary (blueprint in, rules table,
stack plan out, selection failures) is typed through these contracts.
"""

from .blueprint_contracts import (
    PersistenceType,
    ComplianceType,
    LanguageMode,
    Constraints,
    TrafficProfile,
    Blueprint,
)

from .rules_contracts import (
    METRIC_NAMES,
    WILDCARD_REGIONS,
    Weights,
    Metrics,
    CandidateRequirements,
    Candidate,
    SelectionOptions,
    Toolchain,
    ComplianceRequirement,
    RulesDocument,
)

from .plan_contracts import (
    Decision,
    Service,
    Stack,
    Estimated,
    Meta,
    StackPlan,
)

from .errors import (
    CandidateViolation,
    TopicFailure,
    ConfigError,
    SelectionError,
    InvalidSeed,
    NoEligibleCandidate,
    OutputInvariantViolation,
    BlueprintValidationError,
)

from .validation import collect_plan_problems, validate_stack_plan

__all__ = [
    # Blueprint
    "PersistenceType",
    "ComplianceType",
    "LanguageMode",
    "Constraints",
    "TrafficProfile",
    "Blueprint",
    # Rules
    "METRIC_NAMES",
    "WILDCARD_REGIONS",
    "Weights",
    "Metrics",
    "CandidateRequirements",
    "Candidate",
    "SelectionOptions",
    "Toolchain",
    "ComplianceRequirement",
    "RulesDocument",
    # Plan
    "Decision",
    "Service",
    "Stack",
    "Estimated",
    "Meta",
    "StackPlan",
    # Errors
    "CandidateViolation",
    "TopicFailure",
    "ConfigError",
    "SelectionError",
    "InvalidSeed",
    "NoEligibleCandidate",
    "OutputInvariantViolation",
    "BlueprintValidationError",
    # Validation
    "collect_plan_problems",
    "validate_stack_plan",
]
