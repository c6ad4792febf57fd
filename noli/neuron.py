"""
Neuron model: a three-state cycle (OFF -> ON -> RCVR -> OFF) driven by the
summed output of its input synapses.

A neuron does not own synapses. `inputs` and `outputs` hold synapse
identities that are resolved through the network's synapse arena, which is
passed into `propagate()` and `commit()`.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from loguru import logger

from .errors import ConfigError
from .synapse import Synapse

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    + "<level>{level: <8}</level> | "
    + "<cyan>N:{extra[neuron_id]}</cyan> | "
    + "<level>{message}</level>"
)


def setup_logger(level: str = "INFO") -> None:
    """Setup colored logging for the simulator with specified level."""
    logger.remove()
    logger.configure(extra={"neuron_id": "-"})
    logger.add(
        lambda msg: print(msg, end=""),
        format=LOG_FORMAT,
        level=level.upper(),
        colorize=True,
    )


class NeuronState(str, Enum):
    OFF = "O"
    ON = "F"  # firing
    RCVR = "R"  # refractory


@dataclass(frozen=True)
class NeuronParameters:
    """Fixed per-neuron configuration."""

    threshold: float = 1.0  # Summed input must strictly exceed this to fire
    value_off: float = 0.0  # Pushed to outputs on the tick after firing
    value_on: float = 1.0  # Pushed to outputs when firing

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or not np.isfinite(value):
                raise ConfigError(f"Neuron parameter '{f.name}' must be a finite number, got {value}")

        if self.value_on == self.value_off:
            raise ConfigError(
                f"value_on and value_off must differ, both are {self.value_on}"
            )


class Neuron:
    __slots__ = [
        "id",
        "logger",
        "logger_active",
        "params",
        "state",
        "inputs",
        "outputs",
        "last_trigger",
    ]
    """A node of the network running the OFF/ON/RCVR state machine once per tick."""

    def __init__(self, neuron_id: int, params: NeuronParameters, log_level: str = "INFO"):
        self.id = neuron_id
        self.params = params

        # Performance optimization: pre-compute if debug logging is active
        self.logger_active = log_level.upper() in ("TRACE", "DEBUG")
        self.logger = logger.bind(neuron_id=neuron_id)

        self.state = NeuronState.OFF
        self.inputs: List[int] = []  # synapse ids terminating here
        self.outputs: List[int] = []  # synapse ids originating here
        self.last_trigger = 0.0

        if self.logger_active:
            self.logger.debug(
                f"Initialized: threshold={params.threshold:.3f}, "
                f"off={params.value_off:.3f}, on={params.value_on:.3f}"
            )

    @property
    def threshold(self) -> float:
        return self.params.threshold

    @property
    def value_off(self) -> float:
        return self.params.value_off

    @property
    def value_on(self) -> float:
        return self.params.value_on

    def add_input(self, synapse_id: int) -> None:
        self.inputs.append(synapse_id)

    def add_output(self, synapse_id: int) -> None:
        self.outputs.append(synapse_id)

    # --- Tick phases ---

    def propagate(self, synapses: Sequence[Synapse]) -> NeuronState:
        """Run one state-machine step and return the new state.

        Reads only committed synapse state, writes only `state_next` and the
        plasticity coefficients of the input synapses.
        """
        trigger = 0.0
        winner: Optional[int] = None
        best_delta = -np.inf

        for synapse_id in self.inputs:
            synapse = synapses[synapse_id]
            trigger += synapse.pull()

            # Strictly greater: the first of equal deltas stays the winner
            delta = synapse.delta()
            if delta > best_delta:
                best_delta = delta
                winner = synapse_id

        self.last_trigger = trigger
        previous = self.state
        self.state = _TRANSITIONS[self.state](self, synapses, trigger, winner)

        if self.logger_active and self.state is not previous:
            self.logger.debug(
                f"{previous.name} -> {self.state.name} (trigger={trigger:.3f}, "
                f"threshold={self.params.threshold:.3f})"
            )

        for synapse_id in self.outputs:
            synapses[synapse_id].propagate()

        return self.state

    def commit(self, synapses: Sequence[Synapse]) -> None:
        """Commit every outbound synapse. The neuron's own state is untouched."""
        for synapse_id in self.outputs:
            synapses[synapse_id].commit()

    def reset(self) -> None:
        """Return to OFF. The only way back to OFF outside the transition table."""
        self.state = NeuronState.OFF
        self.last_trigger = 0.0

    # --- Transition table ---

    def _step_off(self, synapses, trigger: float, winner: Optional[int]) -> NeuronState:
        if not trigger > self.params.threshold:
            return NeuronState.OFF

        for synapse_id in self.inputs:
            synapses[synapse_id].adjust(synapse_id == winner)

        for synapse_id in self.outputs:
            synapses[synapse_id].push(self.params.value_on)

        return NeuronState.ON

    def _step_on(self, synapses, trigger: float, winner: Optional[int]) -> NeuronState:
        for synapse_id in self.outputs:
            synapses[synapse_id].push(self.params.value_off)

        return NeuronState.RCVR

    def _step_rcvr(self, synapses, trigger: float, winner: Optional[int]) -> NeuronState:
        return NeuronState.OFF

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.name,
            "threshold": self.params.threshold,
            "value_off": self.params.value_off,
            "value_on": self.params.value_on,
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
        }

    def __repr__(self) -> str:
        return (
            f"Neuron({self.id}, state={self.state.name}, threshold={self.params.threshold:.3f}, "
            f"inputs={len(self.inputs)}, outputs={len(self.outputs)})"
        )


# Exhaustive over NeuronState; a missing entry fails at import time
_TRANSITIONS = {
    NeuronState.OFF: Neuron._step_off,
    NeuronState.ON: Neuron._step_on,
    NeuronState.RCVR: Neuron._step_rcvr,
}
if set(_TRANSITIONS) != set(NeuronState):
    raise RuntimeError(f"No transition for states {set(NeuronState) - set(_TRANSITIONS)}")
