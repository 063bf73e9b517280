"""Deterministic technology-stack selection."""

from .budget import CostBudget
from .constraint_filter import (
    ConstraintFilter,
    Eligibility,
    FilterOutcome,
    RULE_REGION,
    RULE_LANGUAGE,
    RULE_PERSISTENCE,
    RULE_COMPLIANCE,
    RULE_COST_CEILING,
)
from .scorer import Scorer, ScoreBreakdown, polyglot_penalty, weighted_contributions
from .tie_breaker import Ranking, RankedCandidate, rank_candidates, tie_break_key
from .decision_builder import DecisionBuilder
from .hashing import HASH_PREFIX, canonical_json, hash_value, sha256_hex
from .plan_assembler import PlanAssembler, TopicResult, blueprint_hash, plan_hash
from .engine import (
    MAX_SEED,
    SelectionEngine,
    SelectionResult,
    SelectionTrace,
    TopicEvaluation,
    evaluate,
    select,
)

__all__ = [
    "CostBudget",
    "ConstraintFilter",
    "Eligibility",
    "FilterOutcome",
    "RULE_REGION",
    "RULE_LANGUAGE",
    "RULE_PERSISTENCE",
    "RULE_COMPLIANCE",
    "RULE_COST_CEILING",
    "Scorer",
    "ScoreBreakdown",
    "polyglot_penalty",
    "weighted_contributions",
    "Ranking",
    "RankedCandidate",
    "rank_candidates",
    "tie_break_key",
    "DecisionBuilder",
    "HASH_PREFIX",
    "canonical_json",
    "hash_value",
    "sha256_hex",
    "PlanAssembler",
    "TopicResult",
    "blueprint_hash",
    "plan_hash",
    "MAX_SEED",
    "SelectionEngine",
    "SelectionResult",
    "SelectionTrace",
    "TopicEvaluation",
    "evaluate",
    "select",
]
