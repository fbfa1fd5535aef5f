"""CLI entrypoint for the which engine."""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

from ...pkgs.engine_runtime import BatchRequest, Mode, RunRequest, RunResult
from .engine_service import ExperimentService
from .experiments import EXPERIMENTS, get_experiment

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except FileNotFoundError:
        logger.warning(f"Config file not found: {config_path}")
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config file: {e}")
        sys.exit(1)


def read_script(args: argparse.Namespace) -> str:
    if args.experiment:
        return get_experiment(args.experiment).script
    if args.script == '-':
        return sys.stdin.read()
    return Path(args.script).read_text(encoding='utf-8')


def print_run(result: RunResult):
    print(f"seed={result.seed} mode={result.mode.value} paths={result.n_paths}"
          + (f" chosen={result.chosen_path}" if result.mode is Mode.COLLAPSE else "")
          + f" position={result.screen_position:.4f} which={result.which_value():g}")
    for event in result.observed_trace():
        prefix = f"[+{event.delay:g}ms] " if event.delay > 0 else ""
        print(f"  {prefix}{event.text()}")


def run_single(service: ExperimentService, script: str, args: argparse.Namespace):
    result = service.run(RunRequest(script=script, seed=args.seed))
    print_run(result)


def run_batch(service: ExperimentService, script: str, args: argparse.Namespace):
    def _cancel(signum, frame):
        logger.info(f"Received signal {signum}, skipping remaining runs...")
        service.cancel_batch()

    previous = signal.signal(signal.SIGINT, _cancel)
    try:
        summary = service.run_batch(BatchRequest(
            script=script,
            count=args.runs,
            base_seed=args.seed,
            batch_size=args.batch_size,
        ))
    finally:
        signal.signal(signal.SIGINT, previous)

    counts = summary.count_by_mode()
    print(f"runs={summary.completed}/{summary.requested} "
          f"interference={counts['interference']} collapse={counts['collapse']}"
          + (" (cancelled)" if summary.cancelled else ""))

    lo, hi = summary.screen_range
    for mode in Mode:
        hist, _ = summary.histogram(bins=args.bins, mode=mode)
        if hist.sum() == 0:
            continue
        peak = hist.max()
        bars = "".join(" .:-=+*#%@"[min(9, int(9 * h / peak))] for h in hist)
        print(f"{mode.value:>12} {lo:g} |{bars}| {hi:g}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run multi-path scripts through the which engine",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default='configs/default.yaml',
        help='Path to configuration file'
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '--script',
        type=str,
        help="Path to a script file ('-' reads stdin)"
    )
    source.add_argument(
        '--experiment', '-e',
        type=str,
        choices=[e.id for e in EXPERIMENTS],
        help='Run a bundled example script'
    )
    source.add_argument(
        '--list',
        action='store_true',
        help='List bundled example scripts and exit'
    )

    parser.add_argument(
        '--seed', '-s',
        type=int,
        default=None,
        help='Run seed (base seed for --runs); clock-derived when omitted'
    )

    parser.add_argument(
        '--runs', '-n',
        type=int,
        default=1,
        help='Number of runs over consecutive seeds'
    )

    parser.add_argument(
        '--batch-size',
        type=int,
        default=None,
        help='Runs submitted per batch (config default when omitted)'
    )

    parser.add_argument(
        '--bins',
        type=int,
        default=60,
        help='Histogram bins for batch output'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Export recorded runs to this path prefix'
    )

    parser.add_argument(
        '--format', '-f',
        type=str,
        default='jsonl',
        choices=['csv', 'jsonl'],
        help='Export format'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )

    args = parser.parse_args()

    if args.list:
        for e in EXPERIMENTS:
            print(f"{e.id:<24} {e.title}")
        return

    if not args.script and not args.experiment:
        parser.error("one of --script, --experiment or --list is required")
    if args.runs < 1:
        parser.error("--runs must be at least 1")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = load_config(args.config)
    config['log_level'] = args.log_level
    service = ExperimentService(config)

    try:
        script = read_script(args)
    except OSError as e:
        logger.error(f"Cannot read script: {e}")
        sys.exit(1)

    if args.runs == 1:
        run_single(service, script, args)
    else:
        run_batch(service, script, args)

    if args.output:
        service.export_logs(args.format, args.output)


if __name__ == '__main__':
    main()
