"""
Exception hierarchy for the noli simulator.

NoliError (base)
├── ConfigError   - invalid neuron, synapse or simulation parameters
└── TopologyError - invalid connection between neurons
"""


class NoliError(Exception):
    """Base exception for all noli errors."""


class ConfigError(NoliError, ValueError):
    """Raised when parameters are out of range or inconsistent.

    Parameters are validated when a neuron or synapse is constructed, never
    clamped silently into range.
    """


class TopologyError(NoliError, ValueError):
    """Raised when a connection references an unknown neuron or loops onto itself."""
