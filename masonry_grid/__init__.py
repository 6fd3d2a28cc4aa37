"""Masonry grid layout for Qt.

Provides:
- A pure lane-based masonry layout engine (`compute`)
- A relayout service deciding when to run a pass
- Geometry helpers and a QWidget host that apply the layout
"""

import logging

from .widgets.masonry_types import (GridConfig, InvalidConfiguration, Item,
                                    LayoutResult, Orientation, Placement)
from .widgets.masonry_layout import compute
from .widgets.masonry_relayout_service import MasonryRelayoutService

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'GridConfig',
    'InvalidConfiguration',
    'Item',
    'LayoutResult',
    'MasonryRelayoutService',
    'Orientation',
    'Placement',
    'compute',
]
