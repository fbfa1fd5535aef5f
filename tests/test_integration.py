"""Integration tests for the experiment service, config loading and CLI."""

import json
import sys

import pytest
import yaml

from which_core.apps.engine import EXPERIMENTS, ExperimentService, get_experiment
from which_core.apps.engine import main as cli
from which_core.pkgs.engine_runtime import BatchRequest, EngineConfig, Mode, RunRequest
from which_core.pkgs.observability import RUN_COMPLETED


class TestExperimentService:
    """Integration tests for the complete service."""

    def test_single_run(self):
        service = ExperimentService({'log_level': 'WARNING'})
        result = service.run(RunRequest(script=get_experiment("path-observation").script, seed=42))

        assert result.mode is Mode.COLLAPSE
        assert result.seed == 42
        assert service.metrics.counters["total_runs"] == 1
        assert service.metrics.counters["runs_collapse"] == 1
        assert len(service.recorder.rows) == 1

    def test_seed_manager_supplies_seeds(self):
        service = ExperimentService({'log_level': 'WARNING', 'global_seed': 500})
        script = get_experiment("classic-double-slit").script
        first = service.run(RunRequest(script=script))
        second = service.run(RunRequest(script=script))
        assert (first.seed, second.seed) == (500, 501)

    def test_run_events_published(self):
        service = ExperimentService({'log_level': 'WARNING'})
        seen = []
        service.events.subscribe(RUN_COMPLETED, seen.append)
        service.run(RunRequest(script="which(lambda: 1, lambda: 0)", seed=1))
        assert len(seen) == 1
        assert seen[0].seed == 1

    def test_batch(self):
        service = ExperimentService({'log_level': 'WARNING', 'max_workers': 2})
        summary = service.run_batch(BatchRequest(
            script=get_experiment("independent-detectors").script,
            count=12,
            base_seed=7,
            batch_size=4,
        ))
        assert summary.completed == 12
        assert service.metrics.counters["total_runs"] == 12
        assert sum(summary.count_by_mode().values()) == 12
        assert not service.cancel_batch()

    def test_pattern_for_each_mode(self):
        service = ExperimentService({'log_level': 'WARNING'})
        interference = service.run(RunRequest(script=get_experiment("triple-slit").script, seed=3))
        collapse = service.run(RunRequest(script=get_experiment("path-observation").script, seed=3))
        for result in (interference, collapse):
            pattern = service.pattern(result)
            assert len(pattern["x"]) == len(pattern["intensity"]) == 1000
            assert max(pattern["intensity"]) == pytest.approx(1.0)

    def test_snapshot_and_reset(self):
        service = ExperimentService({'log_level': 'WARNING'})
        service.run(RunRequest(script="which(lambda: 1)", seed=1))
        snapshot = service.snapshot()
        assert snapshot["status"] == "active"
        assert snapshot["metrics_summary"]["total_runs"] == 1
        assert len(snapshot["recent_runs"]) == 1
        assert "run_duration" in snapshot["timers"]

        service.reset()
        assert service.snapshot()["metrics_summary"]["total_runs"] == 0
        assert service.recorder.rows == []

    def test_export_logs(self, tmp_path):
        service = ExperimentService({'log_level': 'WARNING'})
        service.run(RunRequest(script="which(lambda: 1, lambda: 0)", seed=1))

        path = service.export_logs("jsonl", str(tmp_path / "runs"))
        rows = [json.loads(line) for line in open(path)]
        assert rows[0]["seed"] == 1
        assert rows[0]["mode"] == "interference"

        with pytest.raises(ValueError):
            service.export_logs("parquet", str(tmp_path / "runs"))


class TestConfig:
    """Test configuration loading."""

    def test_engine_config_from_dict(self):
        config = EngineConfig.from_dict({
            'screen': {'num_samples': 200, 'diffraction_sigma': 0.5},
            'sandbox': {'max_deferred_calls': 3},
            'unrelated': True,
        })
        assert config.screen.num_samples == 200
        assert config.screen.diffraction_sigma == 0.5
        assert config.sandbox.max_deferred_calls == 3
        assert config.sample_seed_offset == 1000

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(yaml.safe_dump({'screen': {'num_samples': 300}, 'batch_size': 10}))
        config = EngineConfig.from_dict(cli.load_config(str(path)))
        assert config.screen.num_samples == 300
        assert config.batch_size == 10

    def test_missing_config_is_empty(self, tmp_path):
        assert cli.load_config(str(tmp_path / "missing.yaml")) == {}

    def test_config_changes_screen(self):
        service = ExperimentService({'log_level': 'WARNING', 'screen': {'screen_min': -1, 'screen_max': 1}})
        for seed in range(10):
            result = service.run(RunRequest(script=get_experiment("classic-double-slit").script, seed=seed))
            assert -1 <= result.screen_position <= 1


class TestExperimentsCatalog:
    """Test the bundled examples behave as described."""

    @pytest.mark.parametrize("experiment_id,mode", [
        ("classic-double-slit", Mode.INTERFERENCE),
        ("path-observation", Mode.COLLAPSE),
        ("one-sided-observation", Mode.COLLAPSE),
        ("quantum-erasure", Mode.INTERFERENCE),
        ("delayed-choice", Mode.COLLAPSE),
        ("schrodinger-closed", Mode.INTERFERENCE),
        ("schrodinger-opened", Mode.COLLAPSE),
        ("triple-slit", Mode.INTERFERENCE),
    ])
    def test_fixed_outcomes(self, experiment_id, mode):
        service = ExperimentService({'log_level': 'WARNING'})
        result = service.run(RunRequest(script=get_experiment(experiment_id).script, seed=11))
        assert result.mode is mode

    def test_ids_unique(self):
        ids = [e.id for e in EXPERIMENTS]
        assert len(ids) == len(set(ids))

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            get_experiment("no-such-experiment")


class TestCLI:
    """Test the command line entry point."""

    def test_list(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["which-engine", "--list"])
        cli.main()
        out = capsys.readouterr().out
        assert "classic-double-slit" in out

    def test_single_experiment(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setattr(sys, "argv", [
            "which-engine", "--experiment", "delayed-choice", "--seed", "9",
            "--config", str(tmp_path / "none.yaml"),
        ])
        cli.main()
        out = capsys.readouterr().out
        assert "seed=9 mode=collapse" in out
        assert "[+1000ms]" in out

    def test_script_file_batch_with_export(self, monkeypatch, capsys, tmp_path):
        script = tmp_path / "paths.py"
        script.write_text("which(lambda: 1, lambda: 0)\n")
        prefix = tmp_path / "out" / "runs"
        monkeypatch.setattr(sys, "argv", [
            "which-engine", "--script", str(script), "--runs", "6", "--seed", "1",
            "--config", str(tmp_path / "none.yaml"), "--output", str(prefix), "--format", "csv",
        ])
        cli.main()
        out = capsys.readouterr().out
        assert "runs=6/6 interference=6 collapse=0" in out
        assert len((tmp_path / "out" / "runs.csv").read_text().splitlines()) == 7


if __name__ == "__main__":
    pytest.main([__file__])
