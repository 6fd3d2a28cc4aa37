"""Value types shared by the masonry layout engine and its relayout service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class InvalidConfiguration(ValueError):
    """Raised when a grid configuration cannot produce a layout."""


class Orientation(str, Enum):
    """Maps the abstract main/cross axes onto physical x/y."""

    VERTICAL = 'vertical'  # lanes are columns, items stack along y
    HORIZONTAL = 'horizontal'  # lanes are rows, items stack along x

    @classmethod
    def coerce(cls, value) -> 'Orientation':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidConfiguration(
                f'Unknown masonry orientation: {value!r}') from None


@dataclass(frozen=True)
class GridConfig:
    """Configuration for one layout pass."""

    lane_count: int = 3
    orientation: Orientation = Orientation.VERTICAL
    major_spacing: float = 0  # gap between items inside a lane
    minor_spacing: float = 0  # gap between lanes, used by the renderer only
    align_lanes: bool = False
    is_reversed: bool = False

    def validate(self) -> 'GridConfig':
        if self.lane_count < 1:
            raise InvalidConfiguration(
                f'You must specify a minimum of 1 lane (got {self.lane_count}); '
                'lanes are columns in vertical orientation and rows in '
                'horizontal orientation')
        if self.major_spacing < 0 or self.minor_spacing < 0:
            raise InvalidConfiguration(
                f'Spacing must be >= 0 (major={self.major_spacing}, '
                f'minor={self.minor_spacing})')
        return self


@dataclass(frozen=True)
class Item:
    """An item to place: stable index, requested span and measured length."""

    index: int
    span: int = 1
    length: float | None = 0


@dataclass(frozen=True)
class Placement:
    """Where the engine put one item.

    `offset` runs along the main axis; the renderer derives the cross-axis
    position from `lane_start`.
    """

    index: int
    lane_start: int
    offset: float
    span: int
    length: float

    @property
    def end(self) -> float:
        return self.offset + self.length

    @property
    def lanes(self) -> range:
        return range(self.lane_start, self.lane_start + self.span)


@dataclass(frozen=True)
class LayoutResult:
    placements: tuple[Placement, ...] = field(default_factory=tuple)
    total_length: float = 0
    lane_lengths: tuple[float, ...] = field(default_factory=tuple)

    def placement_for(self, index: int) -> Placement | None:
        for placement in self.placements:
            if placement.index == index:
                return placement
        return None
