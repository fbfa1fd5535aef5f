"""
Engine application package.

Contains the high-level service wrapper, the bundled example scripts and
the CLI entrypoint for the which engine.
"""

from .engine_service import ExperimentService
from .experiments import EXPERIMENTS, Experiment, get_experiment

__all__ = ['ExperimentService', 'EXPERIMENTS', 'Experiment', 'get_experiment']
