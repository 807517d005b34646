"""
Library settings: voxelization, shape cache and diagnostics parameters.

Settings can be saved to / loaded from a JSON file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from archshape import log


@dataclass
class VoxelSettings:
    """
    Voxelization parameters for procedural mesh models.

    - resolution: voxels per unit cell edge
    """

    resolution: int = 8

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "VoxelSettings":
        """Deserialize from dictionary."""
        return VoxelSettings(resolution=int(data.get("resolution", 8)))


@dataclass
class ShapeCacheSettings:
    """
    Shape cache behaviour for degenerate (empty) results.

    - empty_retry_interval: seconds during which a key that produced an empty
      volume is answered with the default cube without re-deriving it
    """

    empty_retry_interval: float = 0.0

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "ShapeCacheSettings":
        """Deserialize from dictionary."""
        return ShapeCacheSettings(
            empty_retry_interval=float(data.get("empty_retry_interval", 0.0)),
        )


@dataclass
class ArchShapeSettings:
    """Top-level settings."""

    voxel: VoxelSettings = field(default_factory=VoxelSettings)
    shape_cache: ShapeCacheSettings = field(default_factory=ShapeCacheSettings)
    debug_state: bool = False
    log_level: str = "INFO"

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "voxel": self.voxel.to_dict(),
            "shape_cache": self.shape_cache.to_dict(),
            "debug_state": self.debug_state,
            "log_level": self.log_level,
        }

    @staticmethod
    def from_dict(data: dict) -> "ArchShapeSettings":
        """Deserialize from dictionary."""
        return ArchShapeSettings(
            voxel=VoxelSettings.from_dict(data.get("voxel", {})),
            shape_cache=ShapeCacheSettings.from_dict(data.get("shape_cache", {})),
            debug_state=bool(data.get("debug_state", False)),
            log_level=str(data.get("log_level", "INFO")),
        )

    @staticmethod
    def load(path: str | Path) -> "ArchShapeSettings":
        """Load settings from JSON file. Missing file gives defaults."""
        path = Path(path)
        if not path.exists():
            return ArchShapeSettings()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error(e, f"Settings: failed to read {path}")
            return ArchShapeSettings()
        return ArchShapeSettings.from_dict(data)

    def save(self, path: str | Path) -> None:
        """Save settings to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)


_settings: Optional[ArchShapeSettings] = None


def get_settings() -> ArchShapeSettings:
    """Process-wide settings instance."""
    if _settings is None:
        set_settings(ArchShapeSettings())
    return _settings


def set_settings(settings: ArchShapeSettings) -> None:
    global _settings
    _settings = settings
    log.set_level(settings.log_level)


# The logger follows the default log_level until settings are replaced
get_settings()
