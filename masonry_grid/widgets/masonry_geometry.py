"""Turn engine placements into physical geometry for a Qt renderer."""

from __future__ import annotations

import re
from collections.abc import Iterable

from PySide6.QtCore import QRectF, QSizeF

from masonry_grid.widgets.masonry_types import (GridConfig, LayoutResult,
                                                Orientation, Placement)

SPAN_CLASS_PREFIX = 'base-'

# Leading number of a span tag suffix: "2x" -> 2, "Infinity" -> inf, "x2" -> none.
_SPAN_NUMBER_PATTERN = re.compile(r'[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_IMG_SRC_PATTERN = re.compile(r'<img\b[^>]*?\bsrc\s*=\s*(["\'])(.*?)\1', re.IGNORECASE | re.DOTALL)


def lane_extent(container_cross: float, lane_count: int, minor_spacing: float = 0) -> float:
    """Cross-axis size of a single lane once the gaps between lanes are removed."""
    if lane_count <= 0:
        return 0.0
    return max(0.0, (container_cross - minor_spacing * (lane_count - 1)) / lane_count)


def placement_rect(placement: Placement, config: GridConfig, container_cross: float) -> QRectF:
    """
    Get the physical rectangle for a placement.

    Args:
        placement: Placement produced by the layout engine
        config: Configuration the placement was computed with
        container_cross: Container size along the cross axis (width when
            vertical, height when horizontal)

    Returns:
        QRectF in container coordinates
    """
    lane = lane_extent(container_cross, config.lane_count, config.minor_spacing)
    cross_pos = placement.lane_start * (lane + config.minor_spacing)
    cross_size = lane * placement.span + config.minor_spacing * (placement.span - 1)

    if config.orientation == Orientation.HORIZONTAL:
        return QRectF(placement.offset, cross_pos, placement.length, cross_size)
    return QRectF(cross_pos, placement.offset, cross_size, placement.length)


def grid_size(result: LayoutResult, config: GridConfig, container_cross: float) -> QSizeF:
    """Size the container needs to show the whole layout."""
    if config.orientation == Orientation.HORIZONTAL:
        return QSizeF(result.total_length, container_cross)
    return QSizeF(container_cross, result.total_length)


def span_from_class_names(class_names: str | Iterable[str], lane_count: int) -> int:
    """
    Read an item span from its `base-N` class tag.

    The first tag whose suffix starts with a number wins ("base-2x" reads as
    2). The value is clamped to [1, lane_count], so "base-Infinity" spans
    every lane, and fractions are truncated. Items without one span a single
    lane.
    """
    if isinstance(class_names, str):
        class_names = class_names.split()
    for class_name in class_names:
        if not class_name.startswith(SPAN_CLASS_PREFIX):
            continue
        match = _SPAN_NUMBER_PATTERN.match(class_name, len(SPAN_CLASS_PREFIX))
        if match is None:
            continue
        value = min(max(float(match.group()), 1), max(lane_count, 1))
        return int(value)
    return 1


def image_sources(markup: str | None) -> list[str]:
    """Return the `src` of every `<img>` tag in an HTML fragment."""
    if not markup:
        return []
    return [match.group(2) for match in _IMG_SRC_PATTERN.finditer(markup) if match.group(2)]
