import pytest
from PySide6.QtCore import QCoreApplication, QEvent, QSize, Qt
from PySide6.QtWidgets import QLabel, QWidget

from masonry_grid.widgets.masonry_grid_widget import MasonryGridWidget
from masonry_grid.widgets.masonry_types import GridConfig, Orientation


class FixedTile(QWidget):
    def __init__(self, length):
        super().__init__()
        self._length = length

    def sizeHint(self):
        return QSize(self._length, self._length)


@pytest.fixture
def grid(qapp):
    widget = MasonryGridWidget(GridConfig(lane_count=2, minor_spacing=10))
    widget.resize(210, 400)
    yield widget
    widget.teardown()
    widget.deleteLater()


def test_children_are_positioned_in_lanes(grid):
    tiles = [FixedTile(50), FixedTile(30), FixedTile(20)]
    for tile in tiles:
        grid.add_item(tile)

    grid.service.relayout()

    assert tiles[0].geometry().topLeft().toTuple() == (0, 0)
    assert tiles[1].geometry().topLeft().toTuple() == (110, 0)
    assert tiles[2].geometry().topLeft().toTuple() == (110, 30)
    assert tiles[0].width() == 100
    assert grid.minimumHeight() == 50


def test_spanning_child_covers_both_lanes(grid):
    tile = FixedTile(40)
    grid.add_item(tile, span=2)

    grid.service.relayout()

    assert tile.geometry().width() == 210
    assert tile.geometry().height() == 40


def test_loading_child_defers_layout_until_loaded(grid):
    applied = []
    grid.layoutApplied.connect(lambda result: applied.append(result))
    tile = FixedTile(40)

    grid.add_item(tile, loading=True)
    assert applied == []
    assert grid.service.pending_loads == frozenset({0})

    grid.mark_loaded(tile)
    assert len(applied) == 1


def test_removing_child_discards_its_pending_load(grid):
    loading_tile = FixedTile(40)
    grid.add_item(FixedTile(10))
    grid.add_item(loading_tile, loading=True)

    grid.remove_item(loading_tile)

    assert grid.service.pending_loads == frozenset()
    assert len(grid.items()) == 1
    assert loading_tile not in grid.items()


def test_horizontal_orientation_grows_width(qapp):
    widget = MasonryGridWidget(GridConfig(lane_count=2, orientation=Orientation.HORIZONTAL))
    widget.resize(300, 200)
    tile = FixedTile(70)
    widget.add_item(tile)

    widget.service.relayout()

    assert tile.geometry().getRect() == (0, 0, 70, 100)
    assert widget.minimumWidth() == 70
    widget.teardown()
    widget.deleteLater()


def test_teardown_ignores_late_loads(grid):
    tile = FixedTile(40)
    grid.add_item(tile, loading=True)

    grid.teardown()
    grid.mark_loaded(tile)

    assert grid.service.pass_count == 0


def test_deleted_grid_ignores_late_loads(qapp):
    widget = MasonryGridWidget(GridConfig(lane_count=2))
    tile = FixedTile(40)
    widget.add_item(tile, loading=True)
    service = widget.service

    widget.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
    widget.mark_loaded(tile)

    assert service.is_alive is False
    assert service.pass_count == 0


def test_embedded_grid_is_torn_down_with_its_parent(qapp):
    parent = QWidget()
    widget = MasonryGridWidget(GridConfig(lane_count=2), parent=parent)
    tile = FixedTile(40)
    widget.add_item(tile, loading=True)
    service = widget.service

    parent.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
    widget.mark_loaded(tile)

    assert service.is_alive is False
    assert service.pass_count == 0


def test_cross_resize_made_while_applying_a_pass_is_laid_out(grid):
    tile = FixedTile(40)
    grid.add_item(tile, span=2)
    grid.service.notify_resize(grid.size())

    def _shrink(result):
        if grid.width() != 110:
            grid.resize(110, 400)
            grid.service.notify_resize(grid.size())

    grid.service.layoutComputed.connect(_shrink)
    grid.service.relayout()

    assert grid.width() == 110
    assert tile.geometry().width() == 110


def test_span_is_read_from_class_property(grid):
    wide = FixedTile(40)
    wide.setProperty("class", "card base-2")
    narrow = FixedTile(40)
    narrow.setProperty("class", "card")

    grid.add_item(wide)
    grid.add_item(narrow)

    spans = [p.span for p in grid.service.result.placements]
    assert spans == [2, 1]


def test_explicit_span_overrides_class_property(grid):
    tile = FixedTile(40)
    tile.setProperty("class", "base-2")

    grid.add_item(tile, span=1)

    assert grid.service.result.placements[0].span == 1


def test_rich_label_with_images_waits_for_load(grid):
    label = QLabel('<p>photo</p><img src="photo.png">')
    label.setTextFormat(Qt.TextFormat.RichText)
    plain = QLabel('<img src="photo.png">')
    plain.setTextFormat(Qt.TextFormat.PlainText)

    grid.add_items([plain, label])

    assert grid.service.pending_loads == frozenset({1})
    grid.mark_loaded(label)
    assert grid.service.pending_loads == frozenset()
    assert len(grid.service.result.placements) == 2


def test_add_items_runs_a_single_pass(grid):
    passes_before = grid.service.pass_count

    grid.add_items([FixedTile(10) for _ in range(20)])

    assert grid.service.pass_count == passes_before + 1
    assert len(grid.items()) == 20


class AspectTile(QWidget):
    def hasHeightForWidth(self):
        return True

    def heightForWidth(self, width):
        return width // 2


def test_height_for_width_uses_spanned_lane_extent(grid):
    tile = AspectTile()
    grid.add_item(tile, span=2)

    assert grid.measure(0) == 105
    assert tile.geometry().height() == 105


def test_horizontal_measure_ignores_height_for_width(qapp):
    widget = MasonryGridWidget(GridConfig(lane_count=2, orientation=Orientation.HORIZONTAL))
    widget.resize(300, 200)
    widget.add_item(AspectTile(), span=2)

    assert widget.measure(0) == AspectTile().sizeHint().width()
    widget.teardown()
    widget.deleteLater()
