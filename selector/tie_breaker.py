"""Seeded, order-independent ranking of scored candidates.

Candidates whose scores sit within epsilon of each other form a tie
cluster. Inside a cluster, order comes from a keyed SHA-256 of
(seed, topic, name), never from input order or a random stream, so the
same seed always yields the same ranking and a new seed can only reshuffle
genuine ties.
"""

import hashlib
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from contracts import Candidate

from .scorer import ScoreBreakdown


def tie_break_key(seed: int, topic: str, name: str) -> int:
    """Digest of (seed, topic, name) read as a big-endian unsigned integer."""
    digest = hashlib.sha256(f"{seed}:{topic}:{name}".encode("utf-8")).digest()
    return int.from_bytes(digest, "big")


@dataclass(frozen=True)
class RankedCandidate:
    candidate: Candidate
    breakdown: ScoreBreakdown
    tie_key: int
    tied: bool = False

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def score(self) -> float:
        return self.breakdown.total


@dataclass
class Ranking:
    """Candidates of one topic, best first."""
    topic: str
    ranked: List[RankedCandidate] = field(default_factory=list)
    ties_resolved: bool = False

    @property
    def winner(self) -> RankedCandidate:
        return self.ranked[0]

    def names(self) -> List[str]:
        return [entry.name for entry in self.ranked]


def _clusters(entries: List[Tuple[Candidate, ScoreBreakdown]], epsilon: float) -> List[List[Tuple[Candidate, ScoreBreakdown]]]:
    clusters: List[List[Tuple[Candidate, ScoreBreakdown]]] = []
    for entry in entries:
        if clusters and clusters[-1][0][1].total - entry[1].total <= epsilon:
            clusters[-1].append(entry)
        else:
            clusters.append([entry])
    return clusters


def rank_candidates(
    topic: str,
    scored: Sequence[Tuple[Candidate, ScoreBreakdown]],
    seed: int,
    epsilon: float = 1e-9,
) -> Ranking:
    """Order candidates by (score desc, tie key asc, name asc).

    Args:
        topic: Topic being ranked (part of the tie key)
        scored: Candidates paired with their score breakdowns, any order
        seed: Selection seed
        epsilon: Scores within this distance of a cluster's best are ties

    Returns:
        Ranking with `ties_resolved` set when any cluster held more than one candidate
    """
    # Total pre-order so clustering never depends on input order.
    entries = sorted(scored, key=lambda item: (-item[1].total, item[0].name))

    ranking = Ranking(topic=topic)
    for cluster in _clusters(entries, epsilon):
        tied = len(cluster) > 1
        if tied:
            ranking.ties_resolved = True
        keyed = [
            RankedCandidate(candidate, breakdown, tie_break_key(seed, topic, candidate.name), tied)
            for candidate, breakdown in cluster
        ]
        keyed.sort(key=lambda entry: (entry.tie_key, entry.name))
        ranking.ranked.extend(keyed)
    return ranking
