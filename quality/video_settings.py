"""Encoder settings value type."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class VideoSettings:
    """Target encoder settings pushed to the remote encoder.

    Attributes:
        bitrate: Target bitrate in bits per second
        max_fps: Maximum frame rate
        i_frame_interval: Seconds between forced keyframes
        extra: Other encoder parameters, passed through unmodified
    """

    bitrate: int
    max_fps: int
    i_frame_interval: int
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze pass-through parameters so the instance stays immutable
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def replace(self, **changes: Any) -> "VideoSettings":
        """Return a copy with the given fields changed.

        Args:
            **changes: Field values to override

        Returns:
            New VideoSettings instance
        """
        return replace(self, **changes)

    def to_json(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary.

        Returns:
            Dictionary with encoder fields and pass-through parameters
        """
        data = dict(self.extra)
        data.update(
            {
                "bitrate": self.bitrate,
                "max_fps": self.max_fps,
                "i_frame_interval": self.i_frame_interval,
            }
        )
        return data

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "VideoSettings":
        """Create VideoSettings from a dictionary.

        Unknown keys are kept in ``extra``.

        Args:
            data: Dictionary with at least bitrate, max_fps, i_frame_interval

        Returns:
            VideoSettings instance
        """
        known = ("bitrate", "max_fps", "i_frame_interval")
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(
            bitrate=int(data["bitrate"]),
            max_fps=int(data["max_fps"]),
            i_frame_interval=int(data["i_frame_interval"]),
            extra=extra,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VideoSettings):
            return NotImplemented
        return (
            self.bitrate == other.bitrate
            and self.max_fps == other.max_fps
            and self.i_frame_interval == other.i_frame_interval
            and dict(self.extra) == dict(other.extra)
        )

    def __hash__(self) -> int:
        return hash((self.bitrate, self.max_fps, self.i_frame_interval))
