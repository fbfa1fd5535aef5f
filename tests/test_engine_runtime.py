"""Tests for trace comparison, run orchestration and batches."""

import pytest

from which_core.pkgs.core_physics import DEFAULT_SCREEN, sample_diffraction
from which_core.pkgs.engine_runtime import (
    BatchRunner, EngineConfig, ExperimentRunner, Mode, RunRecorder, RunResult,
    TraceComparator, canonical_trace, run_experiment,
)
from which_core.pkgs.observability import BATCH_PROGRESS, EventBus
from which_core.pkgs.sandbox import ContextFactory, DeterministicRNG, OutputEvent, PathResult

TWO_SILENT = """\
which(
    lambda: 1,
    lambda: 0,
)
"""

TWO_OBSERVED = """\
def path1():
    print('path1')
    return 1

def path2():
    print('path2')
    return 0

which(path1, path2)
"""

TWO_ERASED = """\
def path1():
    print('detected')
    return 1

def path2():
    print('detected')
    return 0

which(path1, path2)
"""

DELAYED = """\
def path1():
    set_timeout(lambda: print('late'), 500)
    return 1

which(path1, lambda: 0)
"""

THREE_SILENT = "which(lambda: -1, lambda: 0, lambda: 1)\n"

THREE_ONE_OBSERVED = """\
def loud():
    print('here')
    return 1

which(lambda: -1, lambda: 0, loud)
"""

RANDOM_DETECTOR = """\
def path1():
    if math.random() > 0.5:
        print('click')
    return 1

which(path1, lambda: 0)
"""


def _path(index, *events):
    return PathResult(index=index, trace=[OutputEvent(args=list(a), delay=d) for a, d in events])


class TestTraceComparator:
    """Test mode classification from traces."""

    def test_single_path_is_interference(self):
        assert TraceComparator().classify([_path(0, (["x"], 0))]) is Mode.INTERFERENCE

    def test_no_output_is_interference(self):
        assert TraceComparator().classify([_path(0), _path(1), _path(2)]) is Mode.INTERFERENCE

    def test_identical_traces_are_interference(self):
        paths = [_path(0, (["a", "b"], 0)), _path(1, (["a", "b"], 0))]
        assert TraceComparator().classify(paths) is Mode.INTERFERENCE

    def test_content_difference_collapses(self):
        paths = [_path(0, (["a"], 0)), _path(1, (["b"], 0))]
        assert TraceComparator().classify(paths) is Mode.COLLAPSE

    def test_delay_difference_collapses(self):
        paths = [_path(0, (["a"], 0)), _path(1, (["a"], 500))]
        assert TraceComparator().classify(paths) is Mode.COLLAPSE

    def test_argument_split_matters(self):
        paths = [_path(0, (["a b"], 0)), _path(1, (["a", "b"], 0))]
        assert TraceComparator().classify(paths) is Mode.COLLAPSE

    def test_return_values_ignored(self):
        paths = [PathResult(index=0, return_value=1.0), PathResult(index=1, return_value=7.0)]
        assert TraceComparator().classify(paths) is Mode.INTERFERENCE

    def test_divergent_pairs(self):
        paths = [_path(0), _path(1, (["x"], 0)), _path(2)]
        assert TraceComparator().divergent_pairs(paths) == [(0, 1), (1, 2)]

    def test_canonical_form_preserves_order(self):
        a = canonical_trace([OutputEvent(args=["1"]), OutputEvent(args=["2"])])
        b = canonical_trace([OutputEvent(args=["2"]), OutputEvent(args=["1"])])
        assert a != b

    def test_common_observation(self):
        assert TraceComparator.common_observation([_path(0, (["a", "b"], 0))]) == "a b"
        assert TraceComparator.common_observation([_path(0)]) == ""
        assert TraceComparator.common_observation([]) == ""


class TestRunResult:
    """Test result invariants."""

    def test_collapse_requires_choice(self):
        with pytest.raises(ValueError):
            RunResult(seed=1, mode=Mode.COLLAPSE, paths=[_path(0)])

    def test_choice_must_be_in_range(self):
        with pytest.raises(ValueError):
            RunResult(seed=1, mode=Mode.COLLAPSE, paths=[_path(0)], chosen_path=1)

    def test_interference_rejects_choice(self):
        with pytest.raises(ValueError):
            RunResult(seed=1, mode=Mode.INTERFERENCE, paths=[_path(0)], chosen_path=0)

    def test_fallback_shape(self):
        result = RunResult.fallback(9)
        assert result.mode is Mode.INTERFERENCE
        assert result.n_paths == 2
        assert result.screen_position == 0.0
        assert all(p.trace == [] and p.return_value == 0.0 for p in result.paths)

    def test_which_value(self):
        paths = [PathResult(index=0, return_value=1.0), PathResult(index=1, return_value=0.0)]
        assert RunResult(seed=1, mode=Mode.INTERFERENCE, paths=paths).which_value() == 0.5
        collapsed = RunResult(seed=1, mode=Mode.COLLAPSE, paths=paths, chosen_path=0)
        assert collapsed.which_value() == 1.0


class TestExperimentRunner:
    """Test full runs."""

    def test_scenario_silent_paths_interfere(self):
        result = run_experiment(TWO_SILENT, seed=1)
        assert result.mode is Mode.INTERFERENCE
        assert result.n_paths == 2
        assert [p.return_value for p in result.paths] == [1.0, 0.0]
        assert all(p.trace == [] for p in result.paths)
        assert result.chosen_path is None

    def test_scenario_observed_paths_collapse(self):
        for seed in range(20):
            result = run_experiment(TWO_OBSERVED, seed=seed)
            assert result.mode is Mode.COLLAPSE
            assert result.chosen_path == DeterministicRNG(seed).choice_index(2)
            center = result.paths[result.chosen_path].return_value
            assert abs(result.screen_position - center) < 1.5

    def test_collapse_position_is_diffraction_draw(self):
        seed = 77
        result = run_experiment(TWO_OBSERVED, seed=seed)
        center = result.paths[result.chosen_path].return_value
        expected = sample_diffraction(center, DeterministicRNG(seed + 1000), DEFAULT_SCREEN)
        assert result.screen_position == expected

    def test_scenario_erased_observation_interferes(self):
        result = run_experiment(TWO_ERASED, seed=5)
        assert result.mode is Mode.INTERFERENCE
        assert [p.trace[0].text() for p in result.paths] == ["detected", "detected"]

    def test_scenario_delayed_observation(self):
        result = run_experiment(DELAYED, seed=5)
        assert result.paths[0].trace == [OutputEvent(args=["late"], delay=500.0)]
        assert result.paths[1].trace == []
        assert result.mode is Mode.COLLAPSE

    def test_scenario_three_paths(self):
        result = run_experiment(THREE_SILENT, seed=3)
        assert result.mode is Mode.INTERFERENCE
        assert result.n_paths == 3
        assert [p.return_value for p in result.paths] == [-1.0, 0.0, 1.0]

        observed = run_experiment(THREE_ONE_OBSERVED, seed=3)
        assert observed.mode is Mode.COLLAPSE
        assert observed.n_paths == 3
        assert 0 <= observed.chosen_path < 3

    def test_determinism(self):
        for seed in (0, 1, 123456, 2 ** 31 - 1):
            assert run_experiment(RANDOM_DETECTOR, seed) == run_experiment(RANDOM_DETECTOR, seed)

    def test_random_detector_mixes_modes(self):
        modes = {run_experiment(RANDOM_DETECTOR, seed).mode for seed in range(40)}
        assert modes == {Mode.INTERFERENCE, Mode.COLLAPSE}

    def test_no_paths_gives_empty_result(self):
        result = run_experiment("print('no which here')\n", seed=4)
        assert result.mode is Mode.INTERFERENCE
        assert result.paths == []
        assert result.screen_position == 0.0

    def test_script_errors_do_not_escape(self):
        result = run_experiment("which(lambda: 1 / 0, lambda: 0)\n", seed=4)
        assert result.n_paths == 2
        assert result.mode is Mode.INTERFERENCE

    def test_positions_on_screen(self):
        for seed in range(30):
            result = run_experiment(RANDOM_DETECTOR, seed)
            assert DEFAULT_SCREEN.screen_min <= result.screen_position <= DEFAULT_SCREEN.screen_max

    def test_context_failure_gives_fallback(self):
        class BrokenFactory(ContextFactory):
            def _build(self, rng, which, label):
                raise MemoryError("no contexts left")

        result = ExperimentRunner(factory=BrokenFactory()).run(TWO_OBSERVED, seed=8)
        assert result == RunResult.fallback(8)

    def test_seed_generated_when_missing(self):
        result = ExperimentRunner().run(TWO_SILENT)
        assert 0 <= result.seed <= 0xFFFFFFFF

    def test_custom_sample_offset_changes_draw_only(self):
        base = ExperimentRunner().run(TWO_SILENT, seed=10)
        shifted = ExperimentRunner(EngineConfig(sample_seed_offset=2000)).run(TWO_SILENT, seed=10)
        assert base.paths == shifted.paths
        assert base.mode is shifted.mode


class TestBatchRunner:
    """Test repeated runs and cancellation."""

    def test_runs_consecutive_seeds(self):
        summary = BatchRunner(ExperimentRunner(), max_workers=2, batch_size=4).run_many(TWO_SILENT, 10, base_seed=100)
        assert summary.completed == 10
        assert [r.seed for r in summary.results] == list(range(100, 110))
        assert summary.count_by_mode() == {"interference": 10, "collapse": 0}
        assert not summary.cancelled

    def test_batch_matches_single_runs(self):
        runner = ExperimentRunner()
        summary = BatchRunner(runner, max_workers=4, batch_size=3).run_many(RANDOM_DETECTOR, 8, base_seed=50)
        for result in summary.results:
            assert result == runner.run(RANDOM_DETECTOR, result.seed)

    def test_post_selection_and_histogram(self):
        summary = BatchRunner(ExperimentRunner(), batch_size=10).run_many(RANDOM_DETECTOR, 30, base_seed=0)
        interference = summary.post_select(Mode.INTERFERENCE)
        collapse = summary.post_select(Mode.COLLAPSE)
        assert len(interference) + len(collapse) == 30
        counts, edges = summary.histogram(bins=20)
        assert counts.sum() == 30
        assert edges[0] == DEFAULT_SCREEN.screen_min
        assert edges[-1] == DEFAULT_SCREEN.screen_max

    def test_cancel_skips_pending_runs(self):
        bus = EventBus()
        batch = BatchRunner(ExperimentRunner(), max_workers=2, batch_size=5, event_bus=bus)
        bus.subscribe(BATCH_PROGRESS, lambda progress: batch.cancel())

        summary = batch.run_many(TWO_SILENT, 20, base_seed=1)
        assert summary.completed == 5
        assert summary.cancelled
        assert batch.cancel_requested

    def test_rejects_empty_batch(self):
        with pytest.raises(ValueError):
            BatchRunner(ExperimentRunner()).run_many(TWO_SILENT, 0)


class TestRunRecorder:
    """Test run recording and export."""

    def test_records_rows(self):
        recorder = RunRecorder()
        recorder.log(run_experiment(TWO_OBSERVED, seed=2))
        row = recorder.get_recent(1)[0]
        assert row["mode"] == "collapse"
        assert row["n_paths"] == 2
        assert row["observation"] in ("path1", "path2")

    def test_disabled_recorder(self):
        recorder = RunRecorder(enabled=False)
        recorder.log(run_experiment(TWO_SILENT, seed=2))
        assert recorder.rows == []

    def test_dump_jsonl_and_csv(self, tmp_path):
        recorder = RunRecorder()
        for seed in range(3):
            recorder.log(run_experiment(TWO_SILENT, seed=seed))
        jsonl = tmp_path / "runs.jsonl"
        csv_path = tmp_path / "out" / "runs.csv"
        recorder.dump_jsonl(str(jsonl))
        recorder.dump_csv(str(csv_path))
        assert len(jsonl.read_text().splitlines()) == 3
        assert csv_path.read_text().splitlines()[0].startswith("seed,mode")


if __name__ == "__main__":
    pytest.main([__file__])
