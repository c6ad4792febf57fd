"""
Tests for synapse transmission and plasticity.
"""

import dataclasses
import random

import pytest

from noli import ConfigError, Synapse, SynapseParameters


def make_synapse(params):
    return Synapse(0, 0, 1, params)


class TestTransmission:
    """Tests for push/pull/commit double buffering."""

    def test_push_is_invisible_until_commit(self, static_params):
        synapse = make_synapse(static_params)
        synapse.push(1.0)

        assert synapse.pull() == 0.0
        assert synapse.state_next == 1.0

        synapse.commit()
        assert synapse.pull() == 1.0

    def test_pull_has_no_side_effects(self, static_params):
        synapse = make_synapse(static_params)
        synapse.push(0.5)
        synapse.commit()

        assert synapse.pull() == synapse.pull() == 0.5
        assert synapse.delta() == 0.5

    def test_delta_tracks_last_commit(self, static_params):
        synapse = make_synapse(static_params)
        synapse.push(1.0)
        synapse.commit()
        assert synapse.delta() == 1.0

        synapse.push(0.5)
        synapse.commit()
        assert synapse.delta() == -0.5
        assert synapse.state_last == 1.0

    def test_commit_formula_uses_coefficients_before_relaxation(self):
        params = SynapseParameters(
            stp_rtn=0.25,
            ltp_rtn=0.25,
            strength=2.0,
            stp_min=0.5,
            stp_max=1.5,
            ltp_min=0.5,
            ltp_max=1.5,
        )
        synapse = make_synapse(params)
        synapse.stp = 1.25
        synapse.ltp = 0.75
        synapse.push(1.0)

        synapse.commit()

        assert synapse.state == 1.0 * 2.0 * 1.25 * 0.75
        assert synapse.stp == 1.0
        assert synapse.ltp == 1.0

    def test_propagate_hook_does_nothing(self, plastic_params):
        synapse = make_synapse(plastic_params)
        synapse.push(1.0)
        before = synapse.to_dict()

        synapse.propagate()

        assert synapse.to_dict() == before
        assert synapse.state_next == 1.0

    def test_reset_keeps_plasticity(self, plastic_params):
        synapse = make_synapse(plastic_params)
        synapse.adjust(True)
        synapse.push(1.0)
        synapse.commit()

        synapse.reset()

        assert (synapse.state, synapse.state_next, synapse.state_last) == (0.0, 0.0, 0.0)
        assert synapse.stp == 1.25


class TestRelaxation:
    """Tests for stp/ltp relaxation toward the baseline."""

    @pytest.mark.parametrize("start, expected", [(1.5, 1.25), (0.5, 0.75), (1.125, 1.0), (0.875, 1.0)])
    def test_relaxes_toward_baseline_without_crossing(self, start, expected):
        params = SynapseParameters(
            stp_rtn=0.25, ltp_rtn=0.25, stp_min=0.5, stp_max=1.5, ltp_min=0.5, ltp_max=1.5
        )
        synapse = make_synapse(params)
        synapse.stp = start
        synapse.ltp = start

        synapse.commit()

        assert synapse.stp == expected
        assert synapse.ltp == expected

    def test_baseline_is_stable(self):
        params = SynapseParameters(stp_rtn=0.25, ltp_rtn=0.25, stp_max=1.5, ltp_max=1.5)
        synapse = make_synapse(params)

        for _ in range(5):
            synapse.commit()

        assert synapse.stp == 1.0
        assert synapse.ltp == 1.0

    def test_rates_are_independent(self):
        params = SynapseParameters(
            stp_rtn=0.25, ltp_rtn=0.0, stp_min=0.5, stp_max=1.5, ltp_min=0.5, ltp_max=1.5
        )
        synapse = make_synapse(params)
        synapse.stp = 1.5
        synapse.ltp = 1.5

        synapse.commit()

        assert synapse.stp == 1.25
        assert synapse.ltp == 1.5


class TestAdjust:
    """Tests for the stp step and the ltp side effect of saturation."""

    def test_fired_raises_stp(self, plastic_params):
        synapse = make_synapse(plastic_params)
        synapse.adjust(True)

        assert synapse.stp == 1.25
        assert synapse.ltp == 1.0

    def test_not_fired_lowers_stp(self, plastic_params):
        synapse = make_synapse(plastic_params)
        synapse.adjust(False)

        assert synapse.stp == 0.75
        assert synapse.ltp == 1.0

    def test_saturation_at_max_raises_ltp(self, plastic_params):
        synapse = make_synapse(plastic_params)
        synapse.adjust(True)
        synapse.adjust(True)
        assert synapse.stp == 1.5
        assert synapse.ltp == 1.0

        synapse.adjust(True)
        assert synapse.stp == 1.5
        assert synapse.ltp == 1.25

    def test_saturation_at_min_lowers_ltp(self, plastic_params):
        synapse = make_synapse(plastic_params)
        for _ in range(3):
            synapse.adjust(False)

        assert synapse.stp == 0.5
        assert synapse.ltp == 0.75

    def test_ltp_is_clamped(self, plastic_params):
        synapse = make_synapse(plastic_params)
        for _ in range(20):
            synapse.adjust(True)
        assert synapse.ltp == 1.5

        for _ in range(40):
            synapse.adjust(False)
        assert synapse.ltp == 0.5

    def test_bounds_hold_for_any_sequence(self):
        params = SynapseParameters(
            stp_rtn=0.03,
            ltp_rtn=0.007,
            strength=1.3,
            stp_min=0.6,
            stp_max=1.7,
            stp_mod=0.11,
            ltp_min=0.8,
            ltp_max=1.2,
            ltp_mod=0.05,
        )
        synapse = make_synapse(params)
        rng = random.Random(0)

        for _ in range(2000):
            op = rng.randrange(3)
            if op == 0:
                synapse.adjust(rng.random() < 0.5)
            elif op == 1:
                synapse.push(rng.uniform(-2.0, 2.0))
            else:
                synapse.commit()

            assert params.stp_min <= synapse.stp <= params.stp_max
            assert params.ltp_min <= synapse.ltp <= params.ltp_max


class TestSynapseParameters:
    """Tests for construction-time validation."""

    def test_relaxation_rates_are_required(self):
        with pytest.raises(TypeError):
            SynapseParameters()  # type: ignore[call-arg]

    def test_none_relaxation_rate_is_rejected(self):
        with pytest.raises(ConfigError, match="stp_rtn"):
            SynapseParameters(stp_rtn=None, ltp_rtn=0.0)  # type: ignore[arg-type]

    def test_inverted_stp_bounds(self):
        with pytest.raises(ConfigError, match="stp_min"):
            SynapseParameters(stp_rtn=0.0, ltp_rtn=0.0, stp_min=1.5, stp_max=0.5)

    def test_inverted_ltp_bounds(self):
        with pytest.raises(ConfigError, match="ltp_min"):
            SynapseParameters(stp_rtn=0.0, ltp_rtn=0.0, ltp_min=1.5, ltp_max=0.5)

    def test_baseline_outside_range(self):
        with pytest.raises(ConfigError, match="baseline"):
            SynapseParameters(stp_rtn=0.0, ltp_rtn=0.0, stp_min=1.2, stp_max=2.0)

    def test_negative_rates(self):
        with pytest.raises(ConfigError, match="ltp_rtn"):
            SynapseParameters(stp_rtn=0.0, ltp_rtn=-0.1)
        with pytest.raises(ConfigError, match="stp_mod"):
            SynapseParameters(stp_rtn=0.0, ltp_rtn=0.0, stp_mod=-1.0)

    def test_non_finite_value(self):
        with pytest.raises(ConfigError, match="strength"):
            SynapseParameters(stp_rtn=0.0, ltp_rtn=0.0, strength=float("nan"))

    def test_parameters_are_immutable(self, plastic_params):
        synapse = make_synapse(plastic_params)
        with pytest.raises(dataclasses.FrozenInstanceError):
            plastic_params.stp_max = 0.5
        assert synapse.params.stp_max == 1.5
