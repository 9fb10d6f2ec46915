"""Render settings.

RenderSettings collects everything a render needs besides the scene itself.
Settings can be loaded from a JSON file; keys that are missing fall back to
the dataclass defaults, unknown keys are rejected.

Example JSON:
    {
        "width": 256,
        "height": 256,
        "estimator": "path",
        "max_bounces": 8,
        "seed": 7,
        "scene": "cornell",
        "output": "color.png"
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from pathtracer.core.integrator import MAX_BOUNCES
from pathtracer.core.renderer import Estimator
from pathtracer.materials.lambertian import DEFAULT_GAMMA
from pathtracer.preview.tonemap import TONE_MAP_METHODS

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Settings for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        estimator: "direct" or "path".
        max_bounces: Bounce cap of the path tracer.
        seed: Seed of the render's random stream. None uses OS entropy.
        gamma: Albedo decoding exponent (direct) and output encoding gamma.
        vfov: Overrides the preset camera's vertical field of view, in degrees.
        scene: Name of the scene preset.
        output: Output image path.
        tone_map: Display tone mapping ("none", "reinhard" or "exposure").
    """

    width: int = 256
    height: int = 256
    estimator: str = Estimator.PATH.value
    max_bounces: int = MAX_BOUNCES
    seed: int | None = 0
    gamma: float = DEFAULT_GAMMA
    vfov: float | None = None
    scene: str = "cornell"
    output: str = "color.png"
    tone_map: str = "none"

    def validate(self) -> RenderSettings:
        """Check value ranges.

        Returns:
            self, to allow chaining.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Resolution must be positive, got {self.width}x{self.height}")
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces must be non-negative, got {self.max_bounces}")
        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.vfov is not None and not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.tone_map not in TONE_MAP_METHODS:
            raise ValueError(f"Unknown tone mapping method: {self.tone_map}")
        self.estimator = Estimator.parse(self.estimator).value
        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderSettings:
        """Build validated settings from a mapping.

        Raises:
            ValueError: On unknown keys or out-of-range values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render settings: {sorted(unknown)}")
        return cls(**data).validate()

    @classmethod
    def load(cls, path: str | Path) -> RenderSettings:
        """Load validated settings from a JSON file."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        logger.info("Loaded render settings from %s", path)
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        with Path(path).open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=4)

    def merged(self, overrides: dict[str, Any]) -> RenderSettings:
        """Copy with every non-None override applied, validated."""
        data = self.to_dict()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return RenderSettings.from_dict(data)
