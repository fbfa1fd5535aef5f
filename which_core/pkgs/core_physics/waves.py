"""Intensity models over the detection screen.

Interference: coherent point sources summed as complex amplitudes,
    A(y) = Σ_j exp(i(k r_j + φ_j)) / sqrt(r_j),   r_j = sqrt(D² + (y - s_j)²)
    I(y) = |A(y)|² · exp(-y² / 2σ_env²)

Diffraction: a single Gaussian blob centered on one source,
    I(y) = exp(-(y - s)² / 2σ_d²)
"""

from typing import Sequence, Tuple

import numpy as np

from .screen import DEFAULT_SCREEN, ScreenConfig, screen_positions

MASK32 = 0xFFFFFFFF


def phase_offset_from_text(text: str) -> float:
    """Map observed text to a phase shift of 0 or π.

    Rolling character-code hash (h = 31h + c mod 2³²); odd hashes give π.
    The empty string gives 0.
    """
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & MASK32
    return float(np.pi) if h & 1 else 0.0


def envelope(y: np.ndarray, cfg: ScreenConfig = DEFAULT_SCREEN) -> np.ndarray:
    return np.exp(-(y * y) / (2 * cfg.envelope_sigma ** 2))


def interference_intensity(sources: Sequence[float], phase_offset: float = 0.0,
                           cfg: ScreenConfig = DEFAULT_SCREEN) -> np.ndarray:
    """N-source interference intensity at each screen sample point.

    ``phase_offset`` is applied to every source except the first.
    """
    y = screen_positions(cfg)
    s = np.asarray(sources, dtype=np.float64)
    if s.size == 0:
        return np.zeros_like(y)

    phases = np.full(s.shape, phase_offset, dtype=np.float64)
    phases[0] = 0.0

    # r[i, j]: distance from source j to screen point i
    dy = y[:, None] - s[None, :]
    r = np.sqrt(cfg.screen_distance ** 2 + dy * dy)
    amplitude = (np.exp(1j * (cfg.wavenumber * r + phases[None, :])) / np.sqrt(r)).sum(axis=1)
    return (amplitude.real ** 2 + amplitude.imag ** 2) * envelope(y, cfg)


def diffraction_intensity(position: float, cfg: ScreenConfig = DEFAULT_SCREEN) -> np.ndarray:
    """Single-source Gaussian blob centered on ``position``."""
    y = screen_positions(cfg)
    delta = y - float(position)
    return np.exp(-(delta * delta) / (2 * cfg.diffraction_sigma ** 2))


def _normalized(intensities: np.ndarray, cfg: ScreenConfig) -> Tuple[np.ndarray, np.ndarray]:
    peak = float(np.max(intensities)) if intensities.size else 0.0
    if not np.isfinite(peak) or peak <= 0:
        return screen_positions(cfg), np.zeros_like(intensities)
    return screen_positions(cfg), intensities / peak


def interference_pattern(sources: Sequence[float], phase_offset: float = 0.0,
                         cfg: ScreenConfig = DEFAULT_SCREEN) -> Tuple[np.ndarray, np.ndarray]:
    """(x, intensity) with intensity scaled to a peak of 1, for plotting."""
    return _normalized(interference_intensity(sources, phase_offset, cfg), cfg)


def diffraction_pattern(position: float,
                        cfg: ScreenConfig = DEFAULT_SCREEN) -> Tuple[np.ndarray, np.ndarray]:
    return _normalized(diffraction_intensity(position, cfg), cfg)
