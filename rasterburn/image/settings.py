"""
Raster Settings

Caller-supplied parameters for one raster conversion. These are plain
values typically bound to sliders in the host application.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ..core.errors import InvalidDimensionError
from ..core.pixel_buffer import check_size
from .color_adjust import BRIGHTNESS_RANGE, CONTRAST_RANGE, GrayscaleFormula
from .resample import InterpolationMode


@dataclass
class RasterSettings:
    """
    Parameters for converting an image to an engraving raster.

    Attributes:
        target_size: Output (width, height) in pixels, or None to keep the source size
        interpolation: Resampling kernel
        flatten_alpha: Composite transparent pixels onto white (during the resize, or on
                       their own when the size is kept)
        formula: Grayscale formula
        custom_weights: (R, G, B) multipliers for the CUSTOM formula
        brightness: Gray offset in [-1, 1]
        contrast: Gray gain in [0, 10]
        dither: Use error diffusion; if False, use the threshold cut
        threshold_cutoff: Luminance cut in [0, 1] when not dithering
        apply_threshold: If False, stop before the cut (preview)
    """
    target_size: Optional[Tuple[int, int]] = None
    interpolation: InterpolationMode = InterpolationMode.HIGH_QUALITY_BICUBIC
    flatten_alpha: bool = True
    formula: GrayscaleFormula = GrayscaleFormula.OPTICAL_CORRECT
    custom_weights: Tuple[float, float, float] = field(default=(1.0, 1.0, 1.0))
    brightness: float = 0.0
    contrast: float = 1.0
    dither: bool = True
    threshold_cutoff: float = 0.5
    apply_threshold: bool = True

    def validate(self) -> Tuple[bool, str]:
        """
        Validate parameters.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if self.target_size is not None:
            if len(self.target_size) != 2:
                return False, "Target size must be (width, height)"
            try:
                check_size(*self.target_size)
            except InvalidDimensionError as e:
                return False, f"Target {e}"

        if len(self.custom_weights) != 3:
            return False, "Custom weights need exactly 3 values"

        return True, ""

    def clamped(self) -> 'RasterSettings':
        """Return a copy with slider values clamped to their documented ranges."""
        return replace(
            self,
            brightness=max(BRIGHTNESS_RANGE[0], min(BRIGHTNESS_RANGE[1], self.brightness)),
            contrast=max(CONTRAST_RANGE[0], min(CONTRAST_RANGE[1], self.contrast)),
            threshold_cutoff=max(0.0, min(1.0, self.threshold_cutoff)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            'target_size': list(self.target_size) if self.target_size else None,
            'interpolation': self.interpolation.name,
            'flatten_alpha': self.flatten_alpha,
            'formula': self.formula.name,
            'custom_weights': list(self.custom_weights),
            'brightness': self.brightness,
            'contrast': self.contrast,
            'dither': self.dither,
            'threshold_cutoff': self.threshold_cutoff,
            'apply_threshold': self.apply_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RasterSettings':
        """Create settings from a dictionary; missing keys use defaults."""
        defaults = cls()
        target_size = data.get('target_size')
        return cls(
            target_size=tuple(target_size) if target_size else None,
            interpolation=InterpolationMode[data.get('interpolation', defaults.interpolation.name)],
            flatten_alpha=data.get('flatten_alpha', defaults.flatten_alpha),
            formula=GrayscaleFormula[data.get('formula', defaults.formula.name)],
            custom_weights=tuple(data.get('custom_weights', defaults.custom_weights)),
            brightness=data.get('brightness', defaults.brightness),
            contrast=data.get('contrast', defaults.contrast),
            dither=data.get('dither', defaults.dither),
            threshold_cutoff=data.get('threshold_cutoff', defaults.threshold_cutoff),
            apply_threshold=data.get('apply_threshold', defaults.apply_threshold),
        )
