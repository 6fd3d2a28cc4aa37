"""Qt container that arranges its child widgets in a masonry grid."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QLabel, QWidget

from masonry_grid.widgets.masonry_geometry import (grid_size, image_sources,
                                                   lane_extent, placement_rect,
                                                   span_from_class_names)
from masonry_grid.widgets.masonry_layout import clamp_span
from masonry_grid.widgets.masonry_relayout_service import (
    MasonryRelayoutService, container_axes)
from masonry_grid.widgets.masonry_types import (GridConfig, LayoutResult,
                                                Orientation)

# Dynamic property holding space-separated class tags such as "card base-2".
CLASS_PROPERTY = 'class'


def markup_of(widget: QWidget) -> str:
    """Rich text shown by a child, empty for widgets without markup."""
    if isinstance(widget, QLabel) and widget.textFormat() != Qt.TextFormat.PlainText:
        return widget.text()
    return ''


class MasonryGridWidget(QWidget):
    """Positions child widgets with the masonry layout engine.

    The widget measures its children (size probe), applies the computed
    placements with `setGeometry` (renderer) and lets a
    MasonryRelayoutService decide when a pass is needed. Lanes are columns in
    vertical orientation and rows in horizontal orientation.

    Children without an explicit span read it from a `base-N` tag in their
    `class` dynamic property. Rich-text labels that embed `<img>` tags count
    as loading until `mark_loaded` is called for them.
    """

    layoutApplied = Signal(object)

    def __init__(self, config: GridConfig | None = None, parent: QWidget | None = None,
                 logger: logging.Logger | None = None):
        super().__init__(parent)
        self._items: list[tuple[QWidget, int]] = []
        self._loading: set[int] = set()
        self._load_callbacks: dict[int, Callable[[], None]] = {}
        # Not parented: the service has to outlive the C++ widget so late
        # callbacks land on a torn-down service.
        self._service = MasonryRelayoutService(self, config, loader=self, logger=logger)
        self._service.layoutComputed.connect(self._apply_layout)

        service, load_callbacks = self._service, self._load_callbacks

        def _on_destroyed(*_):
            load_callbacks.clear()
            service.teardown()

        self.destroyed.connect(_on_destroyed)

    @property
    def service(self) -> MasonryRelayoutService:
        return self._service

    def config(self) -> GridConfig:
        return self._service.config

    def setConfig(self, config: GridConfig):
        self._service.notify_config_change(config)

    def items(self) -> list[QWidget]:
        return [widget for widget, _ in self._items]

    def add_item(self, widget: QWidget, span: int | None = None, loading: bool | None = None):
        """
        Append a child and relayout.

        Args:
            widget: Child to place
            span: Lanes to cover; read from the `class` property when omitted
            loading: Defer the layout until `mark_loaded`; detected from
                embedded images when omitted
        """
        self._append(widget, span, loading)
        self._refresh_items()

    def add_items(self, widgets: Iterable[QWidget]):
        """Append several children with detected spans and loads, then relayout once."""
        for widget in widgets:
            self._append(widget, None, None)
        self._refresh_items()

    def remove_item(self, widget: QWidget):
        index = self._index_of(widget)
        if index is None:
            return
        del self._items[index]
        self._loading = {i if i < index else i - 1 for i in self._loading if i != index}
        widget.setParent(None)
        self._refresh_items()

    def clear(self):
        for widget, _ in self._items:
            widget.setParent(None)
        self._items.clear()
        self._loading.clear()
        self._refresh_items()

    def mark_loading(self, widget: QWidget):
        index = self._index_of(widget)
        if index is not None and index not in self._loading:
            self._loading.add(index)
            self._refresh_items()

    def mark_loaded(self, widget: QWidget):
        """Report that a child's asynchronous content (e.g. an image) finished loading."""
        index = self._index_of(widget)
        if index is None:
            return
        self._loading.discard(index)
        callback = self._load_callbacks.pop(index, None)
        if callback is not None:
            callback()

    def watch(self, index: int, callback: Callable[[], None]) -> Callable[[], None]:
        load_callbacks = self._load_callbacks
        load_callbacks[index] = callback

        def _unsubscribe():
            if load_callbacks.get(index) is callback:
                del load_callbacks[index]

        return _unsubscribe

    def measure(self, index: int) -> float | None:
        if index >= len(self._items):
            return None
        widget, span = self._items[index]
        config = self._service.config

        if config.orientation == Orientation.HORIZONTAL:
            return widget.sizeHint().width()
        if widget.hasHeightForWidth():
            cross, _ = container_axes(self.size(), config.orientation)
            lane = lane_extent(cross, config.lane_count, config.minor_spacing)
            span = clamp_span(span, config.lane_count)
            height = widget.heightForWidth(int(lane * span + config.minor_spacing * (span - 1)))
            if height >= 0:
                return height
        return widget.sizeHint().height()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._service.notify_resize(event.size())

    def closeEvent(self, event):
        self.teardown()
        super().closeEvent(event)

    def teardown(self):
        """Detach from the relayout service; later load or resize callbacks are ignored."""
        self._service.teardown()
        self._load_callbacks.clear()

    def _append(self, widget: QWidget, span: int | None, loading: bool | None):
        if span is None:
            span = span_from_class_names(
                widget.property(CLASS_PROPERTY) or '', self._service.config.lane_count)
        if loading is None:
            loading = bool(image_sources(markup_of(widget)))
        widget.setParent(self)
        widget.show()
        self._items.append((widget, span))
        if loading:
            self._loading.add(len(self._items) - 1)

    def _index_of(self, widget: QWidget) -> int | None:
        for index, (item_widget, _) in enumerate(self._items):
            if item_widget is widget:
                return index
        return None

    def _refresh_items(self):
        self._service.set_items([span for _, span in self._items], self._loading)

    def _apply_layout(self, result: LayoutResult):
        config = self._service.config
        cross, _ = container_axes(self.size(), config.orientation)
        for placement in result.placements:
            widget, _ = self._items[placement.index]
            widget.setGeometry(placement_rect(placement, config, cross).toRect())

        size = grid_size(result, config, cross).toSize()
        if config.orientation == Orientation.HORIZONTAL:
            self.setMinimumWidth(size.width())
        else:
            self.setMinimumHeight(size.height())
        self.layoutApplied.emit(result)
