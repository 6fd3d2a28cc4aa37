import logging
import os
import random
import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (QApplication, QCheckBox, QComboBox, QFrame,
                               QHBoxLayout, QLabel, QScrollArea, QSpinBox,
                               QVBoxLayout, QWidget)

from masonry_grid.utils.settings import (connect_settings, get_settings,
                                         load_grid_config)
from masonry_grid.widgets.masonry_grid_widget import MasonryGridWidget
from masonry_grid.widgets.masonry_types import Orientation

DEMO_ITEM_COUNT = 100
DEMO_UNIT_LENGTH = 32


def configure_logging():
    """Verbose logging in development, errors only otherwise."""
    environment = os.getenv('MASONRY_GRID_ENVIRONMENT')
    if environment == 'development':
        logging.basicConfig(
            level=logging.DEBUG,
            format='[%(asctime)s] %(levelname)s %(name)s: %(message)s')
        print('Running in development environment.')
        return
    logging.basicConfig(level=logging.ERROR)


class DemoTile(QLabel):
    def __init__(self, number: int, units: int, orientation: Orientation):
        super().__init__(str(number))
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setFrameShape(QFrame.Shape.Box)
        self._length = units * DEMO_UNIT_LENGTH
        self._orientation = orientation

    def sizeHint(self):
        hint = super().sizeHint()
        if self._orientation == Orientation.HORIZONTAL:
            hint.setWidth(self._length)
        else:
            hint.setHeight(self._length)
        return hint


class DemoWindow(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle('MasonryGrid')
        self._settings = get_settings()
        config = load_grid_config(self._settings)

        self._grid = MasonryGridWidget(config)
        connect_settings(self._grid.service, self._settings)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setWidget(self._grid)

        controls = QHBoxLayout()
        lanes = QSpinBox()
        lanes.setRange(1, 12)
        lanes.setValue(config.lane_count)
        lanes.valueChanged.connect(
            lambda value: self._settings.setValue('masonry_lane_count', value))
        controls.addWidget(QLabel('Lanes'))
        controls.addWidget(lanes)

        orientation = QComboBox()
        orientation.addItems([o.value for o in Orientation])
        orientation.setCurrentText(config.orientation.value)
        orientation.currentTextChanged.connect(self._on_orientation_changed)
        controls.addWidget(orientation)

        for key, label in (('masonry_align_lanes', 'Align lanes'),
                           ('masonry_is_reversed', 'Reversed')):
            check_box = QCheckBox(label)
            check_box.setChecked(getattr(config, key.removeprefix('masonry_')))
            check_box.toggled.connect(
                lambda checked, key=key: self._settings.setValue(key, checked))
            controls.addWidget(check_box)
        controls.addStretch()

        layout = QVBoxLayout(self)
        layout.addLayout(controls)
        layout.addWidget(scroll_area)

        self._populate(config.orientation)

    def _populate(self, orientation: Orientation):
        self._grid.clear()
        self._grid.add_items(
            DemoTile(number, random.randint(1, 6), orientation)
            for number in range(1, DEMO_ITEM_COUNT + 1)
        )

    def _on_orientation_changed(self, value: str):
        self._settings.setValue('masonry_orientation', value)
        self._populate(Orientation.coerce(value))

    def closeEvent(self, event):
        self._grid.teardown()
        super().closeEvent(event)


def run_demo():
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName('MasonryGrid')
    app.setStyle('Fusion')
    window = DemoWindow()
    window.resize(900, 700)
    window.show()
    sys.exit(app.exec())
