from PySide6.QtCore import QSettings, Signal

from masonry_grid.widgets.masonry_types import GridConfig, Orientation

# Defaults for settings that are accessed from multiple places.
DEFAULT_SETTINGS = {
    'masonry_lane_count': 3,
    'masonry_orientation': Orientation.VERTICAL.value,  # vertical (columns) or horizontal (rows)
    'masonry_major_spacing': 0.0,
    'masonry_minor_spacing': 0.0,
    'masonry_align_lanes': False,
    'masonry_is_reversed': False,
}

MASONRY_KEY_PREFIX = 'masonry_'


class Settings(QSettings):
    # Signal that shows that the setting with the given string was changes
    change = Signal(str, object, name='settingsChanged')

    def __init__(self):
        super().__init__('masonry_grid', 'masonry_grid')

    def setValue(self, key, value):
        super().setValue(key, value)
        self.change.emit(key, value)


_settings = None


def get_settings() -> Settings:
    """Shared instance so the change Signal is shared too."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_grid_config(store=None) -> GridConfig:
    """Build a validated GridConfig from a QSettings-like store."""
    store = store if store is not None else get_settings()

    def _value(key, type_):
        return store.value(key, defaultValue=DEFAULT_SETTINGS[key], type=type_)

    return GridConfig(
        lane_count=_value('masonry_lane_count', int),
        orientation=Orientation.coerce(_value('masonry_orientation', str)),
        major_spacing=_value('masonry_major_spacing', float),
        minor_spacing=_value('masonry_minor_spacing', float),
        align_lanes=_value('masonry_align_lanes', bool),
        is_reversed=_value('masonry_is_reversed', bool),
    ).validate()


def connect_settings(service, store=None):
    """Forward changes of masonry settings to a relayout service."""
    store = store if store is not None else get_settings()

    def _on_change(key, _value):
        if str(key).startswith(MASONRY_KEY_PREFIX):
            service.notify_config_change(load_grid_config(store))

    store.change.connect(_on_change)
    return _on_change
