"""Inverse-CDF sampling of screen positions."""

import logging
from typing import Sequence

import numpy as np

from ..sandbox.rng import DeterministicRNG
from .screen import DEFAULT_SCREEN, ScreenConfig, screen_positions
from .waves import diffraction_intensity, interference_intensity

logger = logging.getLogger(__name__)


def intensity_to_cdf(intensities: np.ndarray) -> np.ndarray:
    """Normalize an intensity array into a cumulative distribution.

    The last value is forced to exactly 1. Flat-zero, negative or
    non-finite inputs fall back to the uniform distribution; an empty input
    gives an empty CDF, which ``sample_from_cdf`` also treats as uniform.
    """
    values = np.asarray(intensities, dtype=np.float64)
    if values.size == 0:
        return values

    total = float(np.sum(values))
    if not np.isfinite(total) or total <= 0 or np.any(values < 0) or not np.all(np.isfinite(values)):
        logger.debug("Degenerate intensity array, sampling uniformly")
        values = np.ones_like(values)
        total = float(values.size)

    cdf = np.minimum(np.cumsum(values / total), 1.0)
    cdf[-1] = 1.0
    return cdf


def sample_from_cdf(cdf: np.ndarray, draw: float, cfg: ScreenConfig = DEFAULT_SCREEN) -> float:
    """Screen position at the lowest index whose cumulative value is >= draw."""
    positions = screen_positions(cfg)
    if len(cdf) == 0:
        cdf = intensity_to_cdf(np.ones(len(positions)))
    if len(cdf) != len(positions):
        raise ValueError(f"CDF has {len(cdf)} points, screen has {len(positions)}")
    idx = int(np.searchsorted(cdf, draw, side='left'))
    return float(positions[min(idx, len(positions) - 1)])


def sample_interference(sources: Sequence[float], rng: DeterministicRNG,
                        phase_offset: float = 0.0,
                        cfg: ScreenConfig = DEFAULT_SCREEN) -> float:
    """Draw one screen position from the N-source interference pattern."""
    cdf = intensity_to_cdf(interference_intensity(sources, phase_offset, cfg))
    return sample_from_cdf(cdf, rng.random(), cfg)


def sample_diffraction(position: float, rng: DeterministicRNG,
                       cfg: ScreenConfig = DEFAULT_SCREEN) -> float:
    """Draw one screen position from the single-source diffraction blob."""
    cdf = intensity_to_cdf(diffraction_intensity(position, cfg))
    return sample_from_cdf(cdf, rng.random(), cfg)
