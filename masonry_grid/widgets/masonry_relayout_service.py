"""Decides when the masonry grid needs a new layout pass."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from PySide6.QtCore import QObject, Signal

from masonry_grid.widgets.masonry_layout import compute
from masonry_grid.widgets.masonry_types import (GridConfig, Item, LayoutResult,
                                                Orientation)

_logger = logging.getLogger(__name__)


class SizeProbe(Protocol):
    def measure(self, index: int) -> float | None:
        """Main-axis length of the item at `index`, or None if not measured yet."""


class ContentLoader(Protocol):
    def watch(self, index: int, callback: Callable[[], None]) -> Callable[[], None]:
        """Call `callback` once the item's content has loaded; return an unsubscribe function."""


def container_axes(container_size, orientation: Orientation) -> tuple[float, float]:
    """Split a container size into (cross length, main-axis bound)."""
    if hasattr(container_size, 'width'):
        width, height = container_size.width(), container_size.height()
    else:
        width, height = container_size
    if orientation == Orientation.HORIZONTAL:
        return float(height), float(width)
    return float(width), float(height)


class MasonryRelayoutService(QObject):
    """Owns the relayout decisions for one masonry grid.

    Passes run on config changes, on container resizes that change the cached
    container size, and once every pending content load of the current item
    set has finished.
    """

    layoutComputed = Signal(object)

    def __init__(self, probe: SizeProbe, config: GridConfig | None = None, *,
                 loader: ContentLoader | None = None,
                 logger: logging.Logger | None = None,
                 parent: QObject | None = None):
        super().__init__(parent)
        self._probe = probe
        self._config = (config or GridConfig()).validate()
        self._loader = loader
        self._log = logger or _logger
        self._spans: list[int] = []
        self._generation = 0
        self._pending: set[int] = set()
        self._unsubscribers: list[Callable[[], None]] = []
        self._cached_axes: tuple[float, float] | None = None
        self._result: LayoutResult | None = None
        self._pass_count = 0
        self._alive = True
        self._computing = False
        self._deferred_axes: tuple[float, float] | None = None
        self._following_up = False

    @property
    def config(self) -> GridConfig:
        return self._config

    @property
    def result(self) -> LayoutResult | None:
        return self._result

    @property
    def pending_loads(self) -> frozenset[int]:
        return frozenset(self._pending)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pass_count(self) -> int:
        return self._pass_count

    @property
    def is_alive(self) -> bool:
        return self._alive

    def set_items(self, spans: Sequence[int], pending_loads: Iterable[int] = ()) -> int:
        """
        Replace the item set.

        Args:
            spans: Requested span of every item, in placement order
            pending_loads: Indices whose content is still loading

        Returns:
            The generation token of the new item set
        """
        if not self._alive:
            return self._generation

        self._release_watches()
        self._spans = list(spans)
        self._generation += 1
        self._pending = {index for index in pending_loads if 0 <= index < len(self._spans)}

        if self._loader is not None:
            for index in sorted(self._pending):
                self._unsubscribers.append(
                    self._loader.watch(index, self.load_callback(index)))

        if not self._pending:
            self.relayout()
        else:
            self._log.debug('Waiting for %d content loads before layout', len(self._pending))
        return self._generation

    def load_callback(self, index: int) -> Callable[[], None]:
        """Callback for one item's load completion, bound to the current item set."""
        generation = self._generation

        def _on_loaded():
            self.notify_content_loaded(index, generation)

        return _on_loaded

    def notify_content_loaded(self, index: int, generation: int | None = None):
        if not self._alive:
            return
        if generation is not None and generation != self._generation:
            self._log.debug('Ignoring load of item %s from stale item set %s', index, generation)
            return
        if index not in self._pending:
            return

        self._pending.discard(index)
        if not self._pending:
            self.relayout()

    def notify_resize(self, container_size):
        """Relayout only if the container's cross length or main-axis bound changed."""
        if not self._alive:
            return
        axes = container_axes(container_size, self._config.orientation)
        if axes == self._cached_axes:
            return
        if self._computing:
            # Resize caused by the renderer applying the running pass; settled
            # once the pass finishes.
            self._deferred_axes = axes
            return
        self._cached_axes = axes
        self.relayout()

    def notify_config_change(self, config: GridConfig):
        if not self._alive:
            return
        config.validate()
        if self._cached_axes is not None and config.orientation != self._config.orientation:
            # Same container, axes swap roles.
            self._cached_axes = self._cached_axes[::-1]
        self._config = config
        self.relayout()

    def relayout(self) -> LayoutResult | None:
        """Measure every item and run a full pass; InvalidConfiguration propagates."""
        if not self._alive or self._computing:
            return self._result

        self._computing = True
        try:
            items = [
                Item(index=index, span=span, length=self._probe.measure(index) or 0)
                for index, span in enumerate(self._spans)
            ]
            result = compute(items, self._config, logger=self._log)
            self._result = result
            self._pass_count += 1
            self.layoutComputed.emit(result)
        finally:
            self._computing = False

        return self._settle_deferred_resize(result)

    def _settle_deferred_resize(self, result: LayoutResult) -> LayoutResult:
        """Apply a resize reported while the pass ran.

        A main-axis change is the renderer growing the container and is only
        cached. A cross-axis change invalidates the pass just made, so one
        follow-up pass runs with the new size.
        """
        axes, self._deferred_axes = self._deferred_axes, None
        if axes is None or axes == self._cached_axes or not self._alive:
            return result

        previous, self._cached_axes = self._cached_axes, axes
        if previous is not None and previous[0] == axes[0]:
            return result
        if self._following_up:
            self._log.warning('Container cross length changed again during a follow-up pass '
                              '(%s -> %s); not relaying out again', previous, axes)
            return result

        self._following_up = True
        try:
            return self.relayout()
        finally:
            self._following_up = False

    def teardown(self):
        """Stop reacting to notifications and drop all load watches."""
        self._alive = False
        self._pending.clear()
        self._release_watches()

    def _release_watches(self):
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()
