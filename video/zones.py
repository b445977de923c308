"""Named frame regions used to localize motion analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from configs.settings import ZoneConfig
from contracts.types import round_half_up


@dataclass(frozen=True)
class PixelZone:
    """Zone bounds in pixels, half-open: rows [y1, y2), columns [x1, x2)."""

    name: str
    x1: int
    x2: int
    y1: int
    y2: int

    @property
    def area(self) -> int:
        return max(0, self.x2 - self.x1) * max(0, self.y2 - self.y1)

    def crop(self, image):
        return image[self.y1:self.y2, self.x1:self.x2]


def to_pixel_zone(zone: ZoneConfig, width: int, height: int) -> PixelZone:
    return PixelZone(
        name=zone.name,
        x1=round_half_up(width * zone.x1),
        x2=round_half_up(width * zone.x2),
        y1=round_half_up(height * zone.y1),
        y2=round_half_up(height * zone.y2),
    )


def resolve_zones(zones: Iterable[ZoneConfig], width: int, height: int) -> Dict[str, PixelZone]:
    """Pixel zones for a frame size, keyed by zone name in configuration order."""
    return {zone.name: to_pixel_zone(zone, width, height) for zone in zones}


__all__ = ["PixelZone", "to_pixel_zone", "resolve_zones"]
