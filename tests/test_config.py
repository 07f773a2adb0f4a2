import pytest
import yaml

from motiongrid.config import MotionConfig, create_default_config, load_config, save_config
from motiongrid.errors import ConfigError


def test_defaults():
    config = MotionConfig()

    assert config.cell_count == 20
    assert config.diff_threshold == 50
    assert config.blur_kernel == 5
    assert (config.canvas_width, config.canvas_height) == (640, 480)
    assert (config.local_port, config.dest_host, config.dest_port) == (8887, "127.0.0.1", 8888)
    assert config.square_address == "/OpticalFlowExample/Square"
    assert config.reference_mode == "background"
    assert config.hold_last_signal is True
    assert not config.send_elapsed_frames


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(str(tmp_path / "missing.yaml")) == MotionConfig()


def test_load_overrides_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"cell_count": 10, "dest_port": 9000, "bogus": 1}))

    config = load_config(str(path))

    assert config.cell_count == 10
    assert config.dest_port == 9000
    assert config.diff_threshold == 50


def test_keyword_overrides_win(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("cell_count: 10\n")

    config = load_config(str(path), cell_count=8, dest_host=None)

    assert config.cell_count == 8
    assert config.dest_host == "127.0.0.1"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(str(path)) == MotionConfig()


@pytest.mark.parametrize("values", [
    {"cell_count": 0},
    {"cell_count": 641},
    {"canvas_width": -1},
    {"blur_kernel": 4},
    {"diff_threshold": 256},
    {"dest_port": 70000},
    {"reference_mode": "flow"},
    {"square_address": "no-slash"},
])
def test_invalid_values_raise(tmp_path, values):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(values))

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_malformed_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("cell_count: [1, 2\n")

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n")

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_save_and_reload(tmp_path):
    path = str(tmp_path / "config.yaml")
    save_config(MotionConfig(cell_count=12, grid_color=(1, 2, 3, 4)), path)

    config = load_config(path)

    assert config.cell_count == 12
    assert config.grid_color == (1, 2, 3, 4)


def test_create_default_config(tmp_path):
    path = tmp_path / "config.yaml"
    config = create_default_config(str(path))

    assert path.exists()
    assert load_config(str(path)) == config
