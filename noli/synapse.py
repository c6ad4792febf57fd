"""
Synapse model: a directed, double-buffered connection with short-term (stp)
and long-term (ltp) plasticity coefficients.

A synapse transmits `state_next * strength * stp * ltp` on every commit.
Values pushed during a tick only become visible to `pull()` after the commit,
so every neuron reads the same synapse state for the whole propagate phase.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict

import numpy as np

from .errors import ConfigError

# Both plasticity coefficients relax toward this value on every commit
PLASTICITY_BASELINE = 1.0


@dataclass(frozen=True)
class SynapseParameters:
    """Parameters for a single synapse.

    The relaxation rates have no default: a synapse whose coefficients should
    not relax must say so with an explicit 0.0.
    """

    stp_rtn: float  # Per-commit relaxation of stp toward the baseline
    ltp_rtn: float  # Per-commit relaxation of ltp toward the baseline
    strength: float = 1.0
    stp_min: float = 1.0
    stp_max: float = 1.0
    stp_mod: float = 0.0  # stp step applied by adjust()
    ltp_min: float = 1.0
    ltp_max: float = 1.0
    ltp_mod: float = 0.0  # ltp step applied when stp saturates

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                raise ConfigError(f"Synapse parameter '{f.name}' is required")
            if not np.isfinite(value):
                raise ConfigError(f"Synapse parameter '{f.name}' must be finite, got {value}")

        if self.stp_min > self.stp_max:
            raise ConfigError(
                f"stp_min ({self.stp_min}) must not exceed stp_max ({self.stp_max})"
            )
        if self.ltp_min > self.ltp_max:
            raise ConfigError(
                f"ltp_min ({self.ltp_min}) must not exceed ltp_max ({self.ltp_max})"
            )

        # Coefficients start at the baseline, so it must lie inside both ranges
        if not (self.stp_min <= PLASTICITY_BASELINE <= self.stp_max):
            raise ConfigError(
                f"stp range [{self.stp_min}, {self.stp_max}] must contain the baseline {PLASTICITY_BASELINE}"
            )
        if not (self.ltp_min <= PLASTICITY_BASELINE <= self.ltp_max):
            raise ConfigError(
                f"ltp range [{self.ltp_min}, {self.ltp_max}] must contain the baseline {PLASTICITY_BASELINE}"
            )

        for name in ("stp_mod", "ltp_mod", "stp_rtn", "ltp_rtn"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative, got {getattr(self, name)}")


def _relax(value: float, rate: float) -> float:
    """Move value one step of `rate` toward the baseline without crossing it."""
    if value > PLASTICITY_BASELINE:
        return max(value - rate, PLASTICITY_BASELINE)
    if value < PLASTICITY_BASELINE:
        return min(value + rate, PLASTICITY_BASELINE)
    return value


class Synapse:
    __slots__ = [
        "id",
        "source",
        "target",
        "params",
        "strength",
        "state",
        "state_next",
        "state_last",
        "stp",
        "ltp",
    ]
    """A directed connection from neuron `source` to neuron `target`."""

    def __init__(self, synapse_id: int, source: int, target: int, params: SynapseParameters):
        self.id = synapse_id
        self.source = source
        self.target = target
        self.params = params
        self.strength = params.strength

        self.state = 0.0
        self.state_next = 0.0
        self.state_last = 0.0

        self.stp = PLASTICITY_BASELINE
        self.ltp = PLASTICITY_BASELINE

    def push(self, signal: float) -> None:
        """Queue a signal for the next commit."""
        self.state_next = signal

    def pull(self) -> float:
        """Return the value transmitted by the last commit."""
        return self.state

    def delta(self) -> float:
        """Return the change produced by the last commit."""
        return self.state - self.state_last

    def adjust(self, fired: bool) -> None:
        """Nudge stp up (fired) or down; a saturated stp moves ltp instead."""
        p = self.params
        self.stp = self.stp + p.stp_mod if fired else self.stp - p.stp_mod

        if self.stp > p.stp_max:
            self.stp = p.stp_max
            self.ltp = min(self.ltp + p.ltp_mod, p.ltp_max)
        elif self.stp < p.stp_min:
            self.stp = p.stp_min
            self.ltp = max(self.ltp - p.ltp_mod, p.ltp_min)

    def propagate(self) -> None:
        """Hook for same-tick forwarding. Synapses forward nothing by default."""

    def commit(self) -> None:
        """Make the pushed signal visible, then relax stp and ltp one step."""
        self.state_last = self.state
        self.state = self.state_next * self.strength * self.stp * self.ltp

        self.stp = _relax(self.stp, self.params.stp_rtn)
        self.ltp = _relax(self.ltp, self.params.ltp_rtn)

    def reset(self) -> None:
        """Zero the transmission buffers. Learned plasticity is kept."""
        self.state = 0.0
        self.state_next = 0.0
        self.state_last = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "strength": self.strength,
            "state": self.state,
            "stp": self.stp,
            "ltp": self.ltp,
        }

    def __repr__(self) -> str:
        return (
            f"Synapse({self.id}: {self.source} -> {self.target}, state={self.state:.3f}, "
            f"stp={self.stp:.3f}, ltp={self.ltp:.3f})"
        )
