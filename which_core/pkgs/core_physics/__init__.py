"""Screen physics for outcome sampling.

This package contains pure computational kernels without side effects:
- Screen geometry and wave constants
- Multi-source interference and single-source diffraction intensities
- Inverse-CDF sampling driven by the deterministic RNG
"""

from .screen import ScreenConfig, DEFAULT_SCREEN, screen_positions
from .waves import (
    phase_offset_from_text, interference_intensity, diffraction_intensity,
    interference_pattern, diffraction_pattern
)
from .sampling import (
    intensity_to_cdf, sample_from_cdf,
    sample_interference, sample_diffraction
)

__all__ = [
    'ScreenConfig', 'DEFAULT_SCREEN', 'screen_positions',
    'phase_offset_from_text', 'interference_intensity', 'diffraction_intensity',
    'interference_pattern', 'diffraction_pattern',
    'intensity_to_cdf', 'sample_from_cdf',
    'sample_interference', 'sample_diffraction'
]
