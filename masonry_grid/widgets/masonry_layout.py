"""Masonry layout calculator for lane-based grids."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from masonry_grid.widgets.masonry_types import (GridConfig, Item, LayoutResult,
                                                Placement)

_logger = logging.getLogger(__name__)


def clamp_span(span, lane_count: int) -> int:
    """Clamp a requested span into [1, lane_count]; junk values become 1."""
    try:
        span = int(span)
    except (TypeError, ValueError, OverflowError):
        return 1
    return min(max(span, 1), max(lane_count, 1))


def max_lane_length(lane_lengths: Sequence[float], span: int | None = None) -> float:
    """
    Get the longest lane length.

    Args:
        lane_lengths: Current accumulated length of every lane
        span: If given, only the first `span` lanes are inspected (clamped to
            [1, len(lane_lengths)])

    Returns:
        The max lane length, 0 for an empty grid
    """
    lengths = lane_lengths
    if span is not None:
        lengths = lane_lengths[:max(1, min(span, len(lane_lengths)))]
    return max(lengths, default=0)


def next_available_lane(lane_lengths: Sequence[float], span: int) -> tuple[int, float, bool]:
    """
    Find the lane a new item of the given span should start in.

    A start lane is eligible when the item fits inside the grid and none of the
    following `span - 1` lanes is longer than the start lane, so the item lies
    flat across its span. The shortest eligible lane wins; ties go to the
    lowest index.

    Returns:
        (lane index, current length of that lane, whether the fallback was used)
    """
    lane_count = len(lane_lengths)
    lane_idx = None
    min_length = float('inf')

    for i in range(lane_count - span + 1):
        length = lane_lengths[i]
        if length >= min_length:
            continue
        if any(lane_lengths[i + j] > length for j in range(1, span)):
            continue
        lane_idx = i
        min_length = length

    if lane_idx is None:
        return 0, max_lane_length(lane_lengths, span), True
    return lane_idx, min_length, False


def reverse_placements(placements: Iterable[Placement], total_length: float) -> tuple[Placement, ...]:
    """Mirror main-axis offsets so the grid grows from the far edge."""
    return tuple(
        Placement(
            index=p.index,
            lane_start=p.lane_start,
            offset=total_length - p.offset - p.length,
            span=p.span,
            length=p.length,
        )
        for p in placements
    )


def compute(items: Iterable[Item], config: GridConfig, *, logger: logging.Logger | None = None) -> LayoutResult:
    """
    Place every item in order and return the resulting layout.

    Args:
        items: Items in placement priority order
        config: Grid configuration; `lane_count` must be at least 1
        logger: Optional logger for diagnostics (module logger by default)

    Returns:
        LayoutResult with one Placement per item and the total main-axis length

    Raises:
        InvalidConfiguration: If the configuration cannot produce a layout
    """
    log = logger or _logger
    config.validate()

    lane_count = config.lane_count
    lane_lengths = [0.0] * lane_count
    placements = []

    for item in items:
        span = clamp_span(item.span, lane_count)
        length = float(item.length or 0)

        lane_idx, base, fell_back = next_available_lane(lane_lengths, span)
        if fell_back:
            log.warning(
                'No eligible lane for item %s (span=%s, lanes=%s); placing at lane 0',
                item.index, span, lane_lengths)

        offset = base + (0 if base == 0 else config.major_spacing)
        placements.append(Placement(
            index=item.index,
            lane_start=lane_idx,
            offset=offset,
            span=span,
            length=length,
        ))

        for j in range(lane_idx, lane_idx + span):
            lane_lengths[j] = offset + length

        if config.align_lanes and lane_idx + span == lane_count:
            aligned = max_lane_length(lane_lengths)
            lane_lengths = [aligned] * lane_count

    total_length = max_lane_length(lane_lengths)
    result_placements = tuple(placements)
    if config.is_reversed:
        result_placements = reverse_placements(result_placements, total_length)

    log.debug('Masonry pass: %d items, %d lanes, total length %s',
              len(result_placements), lane_count, total_length)

    return LayoutResult(
        placements=result_placements,
        total_length=total_length,
        lane_lengths=tuple(lane_lengths),
    )
