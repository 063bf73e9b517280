"""Immutable, validated rules table.

A RulesRepository is built once per process and passed explicitly into
every selection. Nothing mutates it after construction, so concurrent
selections can share one instance without locking.
"""

from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from contracts import (
    METRIC_NAMES,
    Candidate,
    ConfigError,
    RulesDocument,
    SelectionOptions,
    Toolchain,
    Weights,
)


WEIGHT_SUM_TOLERANCE = 1e-9

# Stack field reserved for polyglot service entries.
RESERVED_TOPICS = frozenset({"services"})


class RulesRepository:
    """Read-only view over a validated rules table."""

    def __init__(self, document: RulesDocument, candidates: Mapping[str, Tuple[Candidate, ...]]):
        """Use `load_rules` instead; this constructor trusts its inputs."""
        self._document = document
        self._topics: Tuple[str, ...] = tuple(candidates.keys())
        self._candidates = MappingProxyType(dict(candidates))
        self._language_topics = frozenset(document.language_topics)
        self._compliance_topics = frozenset(document.compliance_topics)

    @property
    def version(self) -> int:
        return self._document.version

    @property
    def weights(self) -> Weights:
        return self._document.weights

    @property
    def options(self) -> SelectionOptions:
        return self._document.selection

    @property
    def topics(self) -> Tuple[str, ...]:
        """Topics in declaration order; decisions follow this order."""
        return self._topics

    @property
    def persistence_topic(self) -> Optional[str]:
        return self._document.persistence_topic

    def candidates_for(self, topic: str) -> Tuple[Candidate, ...]:
        if topic not in self._candidates:
            raise KeyError(f"Unknown topic: {topic}")
        return self._candidates[topic]

    def find_candidate(self, topic: str, name: str) -> Optional[Candidate]:
        for candidate in self._candidates.get(topic, ()):
            if candidate.name == name:
                return candidate
        return None

    @property
    def language_topic(self) -> Optional[str]:
        return self._document.language_topic

    def is_language_topic(self, topic: str) -> bool:
        """True for language-bearing topics, which a single-language lock applies to."""
        return topic in self._language_topics

    def language_of(self, candidate: Candidate) -> Optional[str]:
        """Language a candidate brings into the plan, if any."""
        if candidate.topic == self.language_topic:
            return candidate.name
        return candidate.required_language

    def service_kind(self, topic: str) -> Optional[str]:
        return self._document.service_topics.get(topic)

    def toolchain(self, language: str) -> Optional[Toolchain]:
        return self._document.toolchains.get(language)

    def required_features(self, topic: str, tags: Iterable[str]) -> FrozenSet[str]:
        """Capabilities a topic's candidates must offer for the given compliance tags.

        A requirement applies to its own `topics` when declared, otherwise to
        the table's compliance topics. Tags without an entry demand nothing.
        """
        features = set()
        for tag in tags:
            requirement = self._document.compliance_requirements.get(tag)
            if requirement is None:
                continue
            scope = requirement.topics if requirement.topics is not None else self._compliance_topics
            if topic in scope:
                features.update(requirement.required_features)
        return frozenset(features)

    def __repr__(self) -> str:
        counts = ", ".join(f"{t}={len(self._candidates[t])}" for t in self._topics)
        return f"RulesRepository(version={self.version}, {counts})"


def _build_candidate(topic: str, index: int, row: Any) -> Candidate:
    if not isinstance(row, dict):
        raise ConfigError(f"candidates.{topic}[{index}] must be a mapping")

    label = row.get("name") or f"#{index}"
    metrics = row.get("metrics")
    if not isinstance(metrics, dict):
        raise ConfigError(f"Candidate {label} in {topic} has no metrics mapping")
    missing = [name for name in METRIC_NAMES if metrics.get(name) is None]
    if missing:
        raise ConfigError(f"Candidate {label} in {topic} is missing metrics: {', '.join(missing)}")

    try:
        return Candidate.model_validate({**row, "topic": topic})
    except ValidationError as e:
        raise ConfigError(f"Candidate {label} in {topic} is invalid: {e}") from e


def load_rules(config: Mapping[str, Any]) -> RulesRepository:
    """Validate a parsed rules table and freeze it into a RulesRepository.

    Args:
        config: Rules table as parsed from YAML or JSON

    Returns:
        The immutable repository

    Raises:
        ConfigError: If weights do not sum to 1 (within 1e-9), a candidate
            lacks a metric, a topic has no candidates, or the table is
            otherwise malformed.
    """
    if not isinstance(config, Mapping):
        raise ConfigError("Rules table must be a mapping")

    try:
        document = RulesDocument.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigError(f"Invalid rules table: {e}") from e

    weight_sum = document.weights.total
    if abs(weight_sum - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ConfigError(f"Weights must sum to 1.0, got {weight_sum!r}")

    if not document.candidates:
        raise ConfigError("Rules table declares no topics")

    candidates: Dict[str, Tuple[Candidate, ...]] = {}
    for topic, rows in document.candidates.items():
        if topic in RESERVED_TOPICS:
            raise ConfigError(f"Topic name {topic!r} is reserved")
        if not rows:
            raise ConfigError(f"Topic {topic} has no candidates")

        built: List[Candidate] = []
        seen_names = set()
        for index, row in enumerate(rows):
            candidate = _build_candidate(topic, index, row)
            if candidate.name in seen_names:
                raise ConfigError(f"Candidate {candidate.name} appears twice in {topic}")
            seen_names.add(candidate.name)
            built.append(candidate)
        candidates[topic] = tuple(built)

    return RulesRepository(document, candidates)
