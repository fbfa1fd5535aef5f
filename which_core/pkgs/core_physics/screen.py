"""Detection screen geometry and tunable wave constants."""

from functools import lru_cache

import numpy as np
from pydantic import BaseModel, Field, model_validator


class ScreenConfig(BaseModel):
    """Screen domain and pattern constants.

    The envelope and diffraction widths and the sample count are tuned for
    a plausible-looking pattern, not for physical accuracy.
    """
    screen_min: float = -5.0
    screen_max: float = 5.0
    num_samples: int = Field(default=1000, ge=2)
    wavelength: float = Field(default=0.4, gt=0)
    screen_distance: float = Field(default=10.0, gt=0)
    envelope_sigma: float = Field(default=2.5, gt=0)
    diffraction_sigma: float = Field(default=0.25, gt=0)

    @model_validator(mode='after')
    def _check_range(self):
        if not self.screen_min < self.screen_max:
            raise ValueError("screen_min must be below screen_max")
        return self

    @property
    def wavenumber(self) -> float:
        """k = 2π/λ"""
        return 2 * np.pi / self.wavelength

    @property
    def screen_range(self):
        return (self.screen_min, self.screen_max)


DEFAULT_SCREEN = ScreenConfig()


@lru_cache(maxsize=32)
def _grid(screen_min: float, screen_max: float, num_samples: int) -> np.ndarray:
    grid = np.linspace(screen_min, screen_max, num_samples)
    grid.setflags(write=False)
    return grid


def screen_positions(cfg: ScreenConfig = DEFAULT_SCREEN) -> np.ndarray:
    """Evenly spaced sample points covering the closed screen interval."""
    return _grid(cfg.screen_min, cfg.screen_max, cfg.num_samples)
