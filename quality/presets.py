"""Controller presets.

Predefined tuning for different deployments: a responsive profile for
well-provisioned links and a conservative one for constrained encoders.
"""

import logging
from typing import Any, Dict

from quality.config import QualityConfig

logger = logging.getLogger(__name__)


# Preset definitions
PRESETS: Dict[str, Dict[str, Any]] = {
    "standard": {
        "name": "Standard",
        "description": "2s polling with a full-quality profile for trusted links",
        "tick_interval_ms": 2000,
        "trusted_bypass_profile": {
            "bitrate_fraction": 1.0,
            "max_fps": 60,
            "i_frame_interval": 60,
        },
    },
    "conservative": {
        "name": "Conservative",
        "description": "5s polling with a half-bitrate, low-fps profile for trusted links",
        "tick_interval_ms": 5000,
        "trusted_bypass_profile": {
            "bitrate_fraction": 0.5,
            "max_fps": 30,
            "i_frame_interval": 10,
        },
    },
}


def get_preset(preset_name: str, **overrides: Any) -> QualityConfig:
    """Build a configuration from a named preset.

    Args:
        preset_name: Preset name ("standard", "conservative")
        **overrides: Extra config fields applied on top of the preset

    Returns:
        QualityConfig configured for the preset

    Raises:
        KeyError: If preset name not found
    """
    preset_name_lower = preset_name.lower()

    if preset_name_lower not in PRESETS:
        available = ", ".join(PRESETS.keys())
        raise KeyError(
            f"Unknown preset: {preset_name}. Available presets: {available}"
        )

    preset = PRESETS[preset_name_lower]

    logger.info(f"Loading preset: {preset['name']} - {preset['description']}")

    fields = {
        "tick_interval_ms": preset["tick_interval_ms"],
        "trusted_bypass_profile": preset["trusted_bypass_profile"],
    }
    fields.update(overrides)
    return QualityConfig(**fields)


def list_presets() -> list[Dict[str, str]]:
    """List all available presets.

    Returns:
        List of preset metadata dictionaries
    """
    return [
        {
            "id": preset_id,
            "name": preset["name"],
            "description": preset["description"],
            "tick_interval_ms": str(preset["tick_interval_ms"]),
        }
        for preset_id, preset in PRESETS.items()
    ]
