"""
Simulation configuration.

Provides Pydantic models for YAML configuration parsing and validation, and
builds a ready-to-run network from a validated configuration.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, model_validator

from .drivers import DEFAULT_POLL_INTERVAL
from .errors import ConfigError
from .network import (
    DEFAULT_MAX_FANOUT,
    DEFAULT_MIN_FANOUT,
    DEFAULT_THRESHOLD_RANGE,
    DEFAULT_VALUE_OFF,
    DEFAULT_VALUE_ON_RANGE,
    Network,
    UniformFanout,
    build_network,
)
from .simulation import DEFAULT_TRACE_LENGTH, SimulationLoop
from .synapse import SynapseParameters

# Demo network: 15 random neurons, neuron 4 always fires to keep activity going
DEFAULT_CONFIG_YAML = """
network:
  neurons: 15
  min_fanout: 1
  max_fanout: 11
synapse:
  strength: 1.0
  stp_min: 0.5
  stp_max: 2.0
  stp_mod: 0.1
  stp_rtn: 0.01
  ltp_min: 0.5
  ltp_max: 1.5
  ltp_mod: 0.05
  ltp_rtn: 0.001
overrides:
  - neuron: 4
    threshold: -1.0
    value_on: 5.0
run:
  interval: 0.5
  trace_length: 22
"""


class NetworkSection(BaseModel):
    """Random topology settings."""

    neurons: int = Field(default=15, ge=0)
    min_fanout: int = Field(default=DEFAULT_MIN_FANOUT, ge=0)
    max_fanout: int = Field(default=DEFAULT_MAX_FANOUT, ge=0)
    seed: Optional[int] = None
    threshold_range: Tuple[float, float] = DEFAULT_THRESHOLD_RANGE
    value_on_range: Tuple[float, float] = DEFAULT_VALUE_ON_RANGE
    value_off: float = DEFAULT_VALUE_OFF

    @model_validator(mode="after")
    def validate_ranges(self):
        if self.min_fanout > self.max_fanout:
            raise ValueError(
                f"min_fanout ({self.min_fanout}) must not exceed max_fanout ({self.max_fanout})"
            )
        for name in ("threshold_range", "value_on_range"):
            low, high = getattr(self, name)
            if low > high:
                raise ValueError(f"{name} lower bound {low} exceeds upper bound {high}")

        low, high = self.value_on_range
        if low == high == self.value_off:
            raise ValueError(
                f"value_on_range [{low}, {high}] can only produce value_off ({self.value_off})"
            )
        return self


class SynapseSection(BaseModel):
    """Parameters shared by every generated synapse. Relaxation rates are required."""

    stp_rtn: float = Field(ge=0.0)
    ltp_rtn: float = Field(ge=0.0)
    strength: float = 1.0
    stp_min: float = 1.0
    stp_max: float = 1.0
    stp_mod: float = Field(default=0.0, ge=0.0)
    ltp_min: float = 1.0
    ltp_max: float = 1.0
    ltp_mod: float = Field(default=0.0, ge=0.0)

    def to_params(self) -> SynapseParameters:
        return SynapseParameters(**self.model_dump())


class NeuronOverride(BaseModel):
    """Replaces some parameters of one neuron after the network is built."""

    neuron: int = Field(ge=0)
    threshold: Optional[float] = None
    value_off: Optional[float] = None
    value_on: Optional[float] = None

    def changes(self) -> Dict[str, float]:
        return self.model_dump(exclude={"neuron"}, exclude_none=True)


class RunSection(BaseModel):
    """Run loop settings."""

    interval: float = Field(default=DEFAULT_POLL_INTERVAL, ge=0.0)
    trace_length: int = Field(default=DEFAULT_TRACE_LENGTH, ge=1)
    max_ticks: Optional[int] = Field(default=None, ge=1)


class SimulationConfig(BaseModel):
    """Complete simulation configuration."""

    network: NetworkSection = Field(default_factory=NetworkSection)
    synapse: SynapseSection
    overrides: List[NeuronOverride] = Field(default_factory=list)
    run: RunSection = Field(default_factory=RunSection)


def _parse(raw_config: Any, source: str) -> SimulationConfig:
    if raw_config is None:
        raise ConfigError(f"Empty configuration {source}")
    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration {source} must be a mapping")

    try:
        return SimulationConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration {source}: {e}") from e


def load_config(config_path: str | Path) -> SimulationConfig:
    """Load and validate simulation configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated SimulationConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If YAML parsing or validation fails
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    return _parse(raw_config, f"file {config_path}")


def load_config_from_string(config_string: str) -> SimulationConfig:
    """Load and validate simulation configuration from YAML string."""
    try:
        raw_config = yaml.safe_load(config_string)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse configuration string: {e}") from e

    return _parse(raw_config, "string")


def default_config() -> SimulationConfig:
    return load_config_from_string(DEFAULT_CONFIG_YAML)


def override_config(
    config: SimulationConfig,
    seed: Optional[int] = None,
    interval: Optional[float] = None,
    max_ticks: Optional[int] = None,
) -> SimulationConfig:
    """Return a validated copy of `config` with the given run settings replaced.

    Raises:
        ConfigError: If the result is not a valid configuration.
    """
    raw_config = config.model_dump()
    if seed is not None:
        raw_config["network"]["seed"] = seed
    if interval is not None:
        raw_config["run"]["interval"] = interval
    if max_ticks is not None:
        raw_config["run"]["max_ticks"] = max_ticks

    return _parse(raw_config, "after overrides")


def build_from_config(config: SimulationConfig, log_level: str = "INFO") -> Network:
    """Build the random network described by `config` and apply its overrides."""
    net = config.network
    network = build_network(
        net.neurons,
        UniformFanout(net.min_fanout, net.max_fanout),
        config.synapse.to_params(),
        seed=net.seed,
        threshold_range=net.threshold_range,
        value_on_range=net.value_on_range,
        value_off=net.value_off,
        log_level=log_level,
    )

    for override in config.overrides:
        network.override_neuron(override.neuron, **override.changes())

    network.validate()
    logger.debug(f"Network statistics: {network.get_network_statistics()}")
    return network


def create_simulation(config: SimulationConfig, log_level: str = "INFO") -> SimulationLoop:
    network = build_from_config(config, log_level=log_level)
    return SimulationLoop(network, trace_length=config.run.trace_length)
