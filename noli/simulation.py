"""
Global tick scheduler.

A tick is two network-wide phases that never interleave:

1. propagate: every neuron, in creation order, runs its state machine
   against the synapse state committed by the previous tick;
2. commit: every neuron, in the same order, commits its outbound synapses.

Pushed values become visible only after phase 2, so all neurons observe
the same synapse state for the whole of phase 1 regardless of order.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Protocol, Tuple

from loguru import logger

from .errors import ConfigError
from .network import Network
from .neuron import NeuronState

# Rows of history shown below each neuron by the terminal view
DEFAULT_TRACE_LENGTH = 22


class TickDriver(Protocol):
    """Supplies tick cadence. Polled once per tick; may block for a bounded time."""

    def should_stop(self) -> bool: ...


class Renderer(Protocol):
    """Consumes read-only snapshots. Must not mutate the simulation."""

    def render(self, snapshot: "NetworkSnapshot") -> None: ...


@dataclass(frozen=True)
class NeuronSnapshot:
    id: int
    state: NeuronState
    threshold: float
    trigger: float
    state_trace: Tuple[NeuronState, ...]  # oldest first, current state last
    input_traces: Tuple[Tuple[float, ...], ...]  # per input synapse, pull() values oldest first


@dataclass(frozen=True)
class NetworkSnapshot:
    tick: int  # ticks completed when the snapshot was taken
    neurons: Tuple[NeuronSnapshot, ...]

    @property
    def fired(self) -> List[int]:
        return [n.id for n in self.neurons if n.state is NeuronState.ON]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "neurons": [
                {
                    "id": n.id,
                    "state": n.state.name,
                    "threshold": n.threshold,
                    "trigger": n.trigger,
                    "state_trace": [s.name for s in n.state_trace],
                    "input_traces": [list(t) for t in n.input_traces],
                }
                for n in self.neurons
            ],
        }


class SimulationLoop:
    """Drives a Network tick by tick and records trailing traces for rendering."""

    def __init__(self, network: Network, trace_length: int = DEFAULT_TRACE_LENGTH):
        if trace_length < 1:
            raise ConfigError(f"trace_length must be at least 1, got {trace_length}")

        self.network = network
        self.trace_length = trace_length
        self.current_tick = 0

        self.state_history: List[Deque[NeuronState]] = []
        self.synapse_history: List[Deque[float]] = []
        self._init_history()

    def _init_history(self) -> None:
        self.state_history = [
            deque([n.state], maxlen=self.trace_length) for n in self.network.neurons
        ]
        self.synapse_history = [
            deque([s.pull()], maxlen=self.trace_length) for s in self.network.synapses
        ]

    def _sync_history(self) -> None:
        # Neurons and synapses added after construction start their traces now
        for neuron in self.network.neurons[len(self.state_history):]:
            self.state_history.append(deque([neuron.state], maxlen=self.trace_length))
        for synapse in self.network.synapses[len(self.synapse_history):]:
            self.synapse_history.append(deque([synapse.pull()], maxlen=self.trace_length))

    def advance_one_tick(self) -> NetworkSnapshot:
        """Run one propagate phase and one commit phase over the whole network."""
        self._sync_history()
        neurons = self.network.neurons
        synapses = self.network.synapses

        for neuron in neurons:
            neuron.propagate(synapses)

        for neuron in neurons:
            neuron.commit(synapses)

        self.current_tick += 1

        for neuron, history in zip(neurons, self.state_history):
            history.append(neuron.state)
        for synapse, history in zip(synapses, self.synapse_history):
            history.append(synapse.pull())

        return self.snapshot()

    def snapshot(self) -> NetworkSnapshot:
        """Return an immutable view of the current tick."""
        self._sync_history()
        neurons = tuple(
            NeuronSnapshot(
                id=neuron.id,
                state=neuron.state,
                threshold=neuron.threshold,
                trigger=neuron.last_trigger,
                state_trace=tuple(self.state_history[neuron.id]),
                input_traces=tuple(
                    tuple(self.synapse_history[synapse_id]) for synapse_id in neuron.inputs
                ),
            )
            for neuron in self.network.neurons
        )
        return NetworkSnapshot(tick=self.current_tick, neurons=neurons)

    def run(
        self,
        driver: TickDriver,
        renderer: Optional[Renderer] = None,
        max_ticks: Optional[int] = None,
    ) -> int:
        """Advance until the driver asks to stop or `max_ticks` is reached.

        Returns:
            Number of ticks run by this call.
        """
        logger.info(
            f"Simulation started at tick {self.current_tick} "
            f"({len(self.network.neurons)} neurons, {len(self.network.synapses)} synapses)"
        )
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            snapshot = self.advance_one_tick()
            ticks += 1

            if renderer is not None:
                renderer.render(snapshot)

            if driver.should_stop():
                break

        logger.info(f"Simulation stopped at tick {self.current_tick} after {ticks} ticks")
        return ticks

    def reset(self) -> None:
        """Reset neurons to OFF, zero synapse buffers and clear traces."""
        self.network.reset()
        self.current_tick = 0
        self._init_history()
