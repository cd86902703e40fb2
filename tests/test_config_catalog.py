import pytest

from wall_scanner.catalog import (
    CLASS_INDEX_TO_TYPE,
    DEFAULT_WALL_COLOR,
    ELEMENT_STYLES,
    TEXTURES,
    ElementType,
    PatternType,
    get_texture,
    texture_color,
)
from wall_scanner.config import ScannerConfig


def test_config_defaults():
    config = ScannerConfig()
    assert config.input_size == 640
    assert config.conf_threshold == 0.5
    assert config.iou_threshold == 0.4
    assert (config.room_width, config.room_depth, config.room_height) == (3.5, 3.5, 2.7)


def test_config_from_dict():
    config = ScannerConfig.from_dict({
        'input_size': 320,
        'execution_providers': ['CUDAExecutionProvider', 'CPUExecutionProvider'],
        'theme': 'dark',
    })
    assert config.input_size == 320
    assert config.execution_providers == ('CUDAExecutionProvider', 'CPUExecutionProvider')
    assert config.extra == {'theme': 'dark'}


def test_class_table_covers_element_types():
    assert set(CLASS_INDEX_TO_TYPE) == {0, 1, 2, 3}
    assert set(CLASS_INDEX_TO_TYPE.values()) == set(ElementType)
    assert set(ELEMENT_STYLES) == set(ElementType)


def test_only_windows_are_recessed():
    assert [t for t, s in ELEMENT_STYLES.items() if s.depth < 0] == [ElementType.WINDOW]


def test_texture_catalog():
    assert len(TEXTURES) == 14
    assert get_texture("stone").type is PatternType.BRICK
    assert get_texture(None) is None
    assert texture_color("marble") == "#f3f4f6"
    assert texture_color("missing") == DEFAULT_WALL_COLOR


def test_textures_are_immutable():
    with pytest.raises(AttributeError):
        TEXTURES["concrete"].color = "#000000"
