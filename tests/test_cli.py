"""
Tests for the terminal viewer.
"""

import signal

import pytest

from cli.noli_cli import build_table, main
from noli import SimulationLoop


@pytest.fixture(autouse=True)
def keep_sigint_handler(monkeypatch):
    """main() installs a SIGINT handler; keep the test session's own."""
    monkeypatch.setattr(signal, "signal", lambda *args: None)


class TestBuildTable:
    def test_one_column_per_neuron(self, chain_network):
        sim = SimulationLoop(chain_network)
        sim.advance_one_tick()
        table = build_table(sim.advance_one_tick())

        assert len(table.columns) == 2
        assert table.row_count == 3
        assert table.title == "Tick 2"

    def test_quiet_caption(self, chain_network):
        table = build_table(SimulationLoop(chain_network).snapshot())
        assert table.caption == "quiet"


class TestMain:
    def test_runs_fixed_number_of_ticks(self, capsys):
        assert main(["--ticks", "3", "--interval", "0", "--seed", "1", "--no-display"]) == 0
        assert "Ran 3 ticks" in capsys.readouterr().out

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.yaml"), "--no-display"]) == 1
        assert "not found" in capsys.readouterr().out

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("network:\n  neurons: 3\n")
        assert main(["--config", str(path), "--no-display"]) == 1

    @pytest.mark.parametrize("ticks", ["0", "-3"])
    def test_invalid_tick_count(self, ticks, capsys):
        assert main(["--ticks", ticks, "--interval", "0", "--seed", "1", "--no-display"]) == 1
        out = capsys.readouterr().out
        assert "max_ticks" in out
        assert "Ran" not in out

    def test_negative_interval(self, capsys):
        assert main(["--ticks", "1", "--interval", "-1", "--no-display"]) == 1
        assert "interval" in capsys.readouterr().out
