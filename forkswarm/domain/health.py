"""
Swarm health classification from fork count.
"""

from enum import Enum


class HealthTier(Enum):
    """Replica redundancy tiers, worst first."""
    DEGRADED = "degraded"
    VULNERABLE = "vulnerable"
    STABLE = "stable"
    HEALTHY = "healthy"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    HealthTier.DEGRADED: 0,
    HealthTier.VULNERABLE: 1,
    HealthTier.STABLE: 2,
    HealthTier.HEALTHY: 3,
}

HEALTHY_MIN = 10
STABLE_MIN = 6
VULNERABLE_MIN = 3


def classify(fork_count: int) -> HealthTier:
    """
    Map a fork count to a health tier.

    >=10 healthy, 6-9 stable, 3-5 vulnerable, fewer than 3 degraded.
    """
    if fork_count < 0:
        raise ValueError(f"fork count cannot be negative: {fork_count}")

    if fork_count >= HEALTHY_MIN:
        return HealthTier.HEALTHY
    if fork_count >= STABLE_MIN:
        return HealthTier.STABLE
    if fork_count >= VULNERABLE_MIN:
        return HealthTier.VULNERABLE
    return HealthTier.DEGRADED
