"""Gift-exchange pairing: the derangement algorithm and its one-shot scheduler."""

from .engine import PairingEngine, PairingResult, build_assignments, shuffle_participants
from .scheduler import PairingScheduler, compute_delay

__all__ = [
    "PairingEngine",
    "PairingResult",
    "PairingScheduler",
    "build_assignments",
    "shuffle_participants",
    "compute_delay",
]
