"""
Pytest fixtures for noli tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from noli import Network, NeuronParameters, SynapseParameters


@pytest.fixture
def static_params():
    """Synapse parameters with plasticity switched off."""
    return SynapseParameters(stp_rtn=0.0, ltp_rtn=0.0)


@pytest.fixture
def plastic_params():
    """Synapse parameters with binary-exact steps so results compare with ==."""
    return SynapseParameters(
        stp_rtn=0.0,
        ltp_rtn=0.0,
        stp_min=0.5,
        stp_max=1.5,
        stp_mod=0.25,
        ltp_min=0.5,
        ltp_max=1.5,
        ltp_mod=0.25,
    )


@pytest.fixture
def fan_in_network(plastic_params):
    """Neuron 0 receives one synapse from each of neurons 1, 2 and 3, in that order."""
    network = Network(log_level="WARNING")
    network.add_neuron(NeuronParameters(threshold=1.0, value_off=0.0, value_on=1.0))
    for _ in range(3):
        network.add_neuron(NeuronParameters(threshold=10.0, value_off=0.0, value_on=1.0))
    for source in (1, 2, 3):
        network.connect(source, 0, plastic_params)
    return network


@pytest.fixture
def chain_network(static_params):
    """A -> s -> B: A fires on its own, B fires on a committed 1.0."""
    network = Network(log_level="WARNING")
    network.add_neuron(NeuronParameters(threshold=-0.5, value_off=0.0, value_on=1.0))
    network.add_neuron(NeuronParameters(threshold=0.5, value_off=0.0, value_on=1.0))
    network.connect(0, 1, static_params)
    return network
