"""
Network arena and random topology generation.

`Network` owns every neuron and synapse and addresses them by stable integer
identity (creation order). Neurons refer to synapses only by identity, so the
connection graph is a pair of index lists per neuron.
"""

import dataclasses
from typing import Any, Dict, List, Optional, Protocol, Tuple

import numpy as np
from loguru import logger

from .errors import ConfigError, TopologyError
from .neuron import Neuron, NeuronParameters
from .synapse import Synapse, SynapseParameters

# Fan-out range of the demo network
DEFAULT_MIN_FANOUT = 1
DEFAULT_MAX_FANOUT = 11

# Parameter ranges of the demo network
DEFAULT_THRESHOLD_RANGE = (0.0, 2.0)
DEFAULT_VALUE_ON_RANGE = (0.01, 2.0)
DEFAULT_VALUE_OFF = 0.0


class Network:
    """Owner of all neurons and synapses of a simulation."""

    def __init__(self, log_level: str = "INFO"):
        self.log_level = log_level
        self.neurons: List[Neuron] = []
        self.synapses: List[Synapse] = []

    def __len__(self) -> int:
        return len(self.neurons)

    def add_neuron(self, params: NeuronParameters) -> int:
        """Create a neuron and return its identity."""
        neuron_id = len(self.neurons)
        self.neurons.append(Neuron(neuron_id, params, log_level=self.log_level))
        return neuron_id

    def connect(self, source: int, target: int, params: SynapseParameters) -> int:
        """Create a synapse from `source` to `target` and return its identity.

        Raises:
            TopologyError: If either identity is unknown or source == target.
        """
        for role, neuron_id in (("source", source), ("target", target)):
            if not (0 <= neuron_id < len(self.neurons)):
                raise TopologyError(
                    f"Connection {role} {neuron_id} out of range [0, {len(self.neurons) - 1}]"
                )
        if source == target:
            raise TopologyError(f"Neuron {source} cannot connect to itself")

        synapse_id = len(self.synapses)
        self.synapses.append(Synapse(synapse_id, source, target, params))
        self.neurons[source].add_output(synapse_id)
        self.neurons[target].add_input(synapse_id)
        return synapse_id

    def neuron(self, neuron_id: int) -> Neuron:
        if not (0 <= neuron_id < len(self.neurons)):
            raise TopologyError(f"Neuron {neuron_id} does not exist")
        return self.neurons[neuron_id]

    def override_neuron(self, neuron_id: int, **changes: Any) -> Neuron:
        """Replace some of a neuron's parameters, validating the result.

        Raises:
            ConfigError: If a field is unknown or the new parameters are invalid.
        """
        neuron = self.neuron(neuron_id)
        known = {f.name for f in dataclasses.fields(NeuronParameters)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigError(f"Unknown neuron parameter(s): {sorted(unknown)}")

        neuron.params = dataclasses.replace(neuron.params, **changes)
        logger.info(f"Neuron {neuron_id} overridden: {changes}")
        return neuron

    def get_connections(self) -> List[Tuple[int, int]]:
        """Return (source, target) for every synapse, in synapse order."""
        return [(s.source, s.target) for s in self.synapses]

    def validate(self) -> None:
        """Check that every synapse is listed exactly once on each side.

        Raises:
            TopologyError: If the index lists disagree with the synapse arena.
        """
        outputs = sorted(sid for n in self.neurons for sid in n.outputs)
        inputs = sorted(sid for n in self.neurons for sid in n.inputs)
        expected = list(range(len(self.synapses)))
        if outputs != expected or inputs != expected:
            raise TopologyError("Synapse index lists do not match the synapse arena")

        for synapse in self.synapses:
            if synapse.source == synapse.target:
                raise TopologyError(f"Synapse {synapse.id} loops onto neuron {synapse.source}")
            if synapse.id not in self.neurons[synapse.source].outputs:
                raise TopologyError(f"Synapse {synapse.id} missing from neuron {synapse.source} outputs")
            if synapse.id not in self.neurons[synapse.target].inputs:
                raise TopologyError(f"Synapse {synapse.id} missing from neuron {synapse.target} inputs")

    def reset(self) -> None:
        for neuron in self.neurons:
            neuron.reset()
        for synapse in self.synapses:
            synapse.reset()

    def get_network_statistics(self) -> Dict[str, Any]:
        """Get basic network statistics."""
        num_neurons = len(self.neurons)
        max_possible = num_neurons * (num_neurons - 1) if num_neurons > 1 else 0
        fan_in = [len(n.inputs) for n in self.neurons]
        fan_out = [len(n.outputs) for n in self.neurons]
        return {
            "num_neurons": num_neurons,
            "num_synapses": len(self.synapses),
            "graph_density": len(self.synapses) / max_possible if max_possible > 0 else 0.0,
            "max_fan_in": max(fan_in, default=0),
            "max_fan_out": max(fan_out, default=0),
            "isolated_neurons": sum(1 for i, o in zip(fan_in, fan_out) if i == 0 and o == 0),
        }


class FanoutPolicy(Protocol):
    """Chooses how many outbound synapses a neuron gets."""

    def __call__(self, neuron_id: int, rng: np.random.Generator) -> int: ...


class UniformFanout:
    """Fan-out drawn uniformly from [low, high]."""

    def __init__(self, low: int = DEFAULT_MIN_FANOUT, high: int = DEFAULT_MAX_FANOUT):
        if low < 0 or high < low:
            raise ConfigError(f"Invalid fan-out range [{low}, {high}]")
        self.low = low
        self.high = high

    def __call__(self, neuron_id: int, rng: np.random.Generator) -> int:
        return int(rng.integers(self.low, self.high + 1))


class FixedFanout:
    """The same fan-out for every neuron."""

    def __init__(self, fanout: int):
        if fanout < 0:
            raise ConfigError(f"Fan-out must be non-negative, got {fanout}")
        self.fanout = fanout

    def __call__(self, neuron_id: int, rng: np.random.Generator) -> int:
        return self.fanout


class RandomTopology:
    """Random network generator.

    Neuron parameters and synapse destinations are drawn from one seeded
    generator, so equal seeds give identical networks.
    """

    def __init__(
        self,
        synapse_params: SynapseParameters,
        seed: Optional[int] = None,
        threshold_range: Tuple[float, float] = DEFAULT_THRESHOLD_RANGE,
        value_on_range: Tuple[float, float] = DEFAULT_VALUE_ON_RANGE,
        value_off: float = DEFAULT_VALUE_OFF,
        log_level: str = "INFO",
    ):
        low, high = value_on_range
        if low > high:
            raise ConfigError(f"value_on_range lower bound {low} exceeds upper bound {high}")
        if low == high == value_off:
            raise ConfigError(
                f"value_on_range [{low}, {high}] can only produce value_off ({value_off})"
            )

        self.synapse_params = synapse_params
        self.seed = seed
        self.threshold_range = threshold_range
        self.value_on_range = value_on_range
        self.value_off = value_off
        self.log_level = log_level
        self.rng = np.random.default_rng(seed)

    def _draw_neuron_params(self) -> NeuronParameters:
        threshold = float(self.rng.uniform(*self.threshold_range))
        value_on = float(self.rng.uniform(*self.value_on_range))
        # value_on == value_off is rejected by NeuronParameters; redraw instead
        while value_on == self.value_off:
            value_on = float(self.rng.uniform(*self.value_on_range))
        return NeuronParameters(threshold=threshold, value_off=self.value_off, value_on=value_on)

    def build(self, neuron_count: int, fanout_policy: FanoutPolicy) -> Network:
        """Create `neuron_count` neurons and wire random outbound synapses.

        Raises:
            TopologyError: If a neuron needs outputs but has no other neuron
                to connect to, or the policy returns a negative fan-out.
        """
        if neuron_count < 0:
            raise TopologyError(f"Neuron count must be non-negative, got {neuron_count}")

        network = Network(log_level=self.log_level)
        for _ in range(neuron_count):
            params = self._draw_neuron_params()
            neuron_id = network.add_neuron(params)
            logger.debug(
                f"Neuron {neuron_id}: thresh {params.threshold:.2f}, "
                f"off {params.value_off:.2f}, on {params.value_on:.2f}"
            )

        for source in range(neuron_count):
            fanout = fanout_policy(source, self.rng)
            if fanout < 0:
                raise TopologyError(f"Fan-out for neuron {source} is negative: {fanout}")
            if fanout > 0 and neuron_count < 2:
                raise TopologyError(
                    f"Neuron {source} needs {fanout} outputs but has no other neuron to connect to"
                )

            for _ in range(fanout):
                # Draw among the other neurons so a self loop is impossible
                target = int(self.rng.integers(0, neuron_count - 1))
                if target >= source:
                    target += 1
                synapse_id = network.connect(source, target, self.synapse_params)
                logger.debug(f"Synapse {synapse_id} connects neuron {source} to neuron {target}")

        stats = network.get_network_statistics()
        logger.info(
            f"Built network: {stats['num_neurons']} neurons, {stats['num_synapses']} synapses, "
            f"graph density {stats['graph_density']:.3f}"
        )
        return network


def build_network(
    neuron_count: int,
    fanout_policy: FanoutPolicy,
    synapse_params: SynapseParameters,
    seed: Optional[int] = None,
    **topology_kwargs: Any,
) -> Network:
    """Build a random network satisfying the no-self-loop wiring contract."""
    topology = RandomTopology(synapse_params, seed=seed, **topology_kwargs)
    return topology.build(neuron_count, fanout_policy)
