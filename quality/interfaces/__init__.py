"""Collaborator interfaces for the quality controller.

Abstract Base Classes (ABCs) defining the contracts of the renderer, the
settings sink, the network hint source and latency tracking.
"""

from quality.interfaces.collaborators import (
    INetworkHintSource,
    IRenderer,
    ISettingsSink,
)
from quality.interfaces.latency import ILatencyTracker

__all__ = [
    # Collaborator interfaces
    "IRenderer",
    "ISettingsSink",
    "INetworkHintSource",
    # Latency interfaces
    "ILatencyTracker",
]
