"""Video stage: zones and frame-differencing motion features."""

from .motion import extract_video_features, frame_window, split_rgb24
from .zones import PixelZone, resolve_zones

__all__ = [
    "extract_video_features",
    "frame_window",
    "split_rgb24",
    "PixelZone",
    "resolve_zones",
]
