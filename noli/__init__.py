"""
noli: a small network of three-state neurons joined by plastic synapses,
advanced in globally synchronised two-phase ticks.
"""

from .errors import NoliError, ConfigError, TopologyError

from .synapse import Synapse, SynapseParameters
from .neuron import Neuron, NeuronParameters, NeuronState, setup_logger

from .network import (
    Network,
    FanoutPolicy,
    UniformFanout,
    FixedFanout,
    RandomTopology,
    build_network,
)

from .simulation import (
    SimulationLoop,
    TickDriver,
    Renderer,
    NeuronSnapshot,
    NetworkSnapshot,
)
from .drivers import EventTickDriver, FixedTickDriver

from .config import (
    SimulationConfig,
    load_config,
    load_config_from_string,
    default_config,
    override_config,
    build_from_config,
    create_simulation,
)

__all__ = [
    # Errors
    "NoliError",
    "ConfigError",
    "TopologyError",
    # Units
    "Synapse",
    "SynapseParameters",
    "Neuron",
    "NeuronParameters",
    "NeuronState",
    "setup_logger",
    # Topology
    "Network",
    "FanoutPolicy",
    "UniformFanout",
    "FixedFanout",
    "RandomTopology",
    "build_network",
    # Scheduling
    "SimulationLoop",
    "TickDriver",
    "Renderer",
    "NeuronSnapshot",
    "NetworkSnapshot",
    "EventTickDriver",
    "FixedTickDriver",
    # Configuration
    "SimulationConfig",
    "load_config",
    "load_config_from_string",
    "default_config",
    "override_config",
    "build_from_config",
    "create_simulation",
]

__version__ = "0.1.0"
