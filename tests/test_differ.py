import numpy as np
import pytest

from motiongrid.differ import FrameDiffer, has_data, to_grayscale
from motiongrid.errors import DimensionMismatch, InvalidInput


@pytest.fixture
def differ():
    return FrameDiffer(threshold=50, blur=5)


def test_mask_matches_input_shape_and_is_binary(differ):
    rng = np.random.default_rng(7)
    reference = rng.integers(0, 256, size=(120, 160), dtype=np.uint8)
    current = rng.integers(0, 256, size=(120, 160), dtype=np.uint8)

    mask = differ.diff(reference, current)

    assert mask.shape == (120, 160)
    assert mask.dtype == np.uint8
    assert set(np.unique(mask)) <= {0, 255}


def test_diff_is_deterministic(differ):
    rng = np.random.default_rng(3)
    reference = rng.integers(0, 256, size=(48, 64), dtype=np.uint8)
    current = rng.integers(0, 256, size=(48, 64), dtype=np.uint8)

    first = differ.diff(reference, current)
    second = differ.diff(reference.copy(), current.copy())

    assert np.array_equal(first, second)


def test_identical_frames_produce_no_change(differ, uniform_frame):
    frame = uniform_frame(120)
    assert np.count_nonzero(differ.diff(frame, frame)) == 0


def test_threshold_is_exclusive(differ, uniform_frame):
    reference = uniform_frame(100)

    # A difference of exactly the threshold is not a change
    assert np.count_nonzero(differ.diff(reference, uniform_frame(150))) == 0
    assert np.all(differ.diff(reference, uniform_frame(151)) == 255)


def test_changed_region_is_marked(differ, uniform_frame):
    reference = uniform_frame(0)
    current = uniform_frame(0)
    current[100:200, 100:300] = 220

    mask = differ.diff(reference, current)

    assert np.all(mask[120:180, 120:280] == 255)
    assert np.count_nonzero(mask[:, :90]) == 0
    assert np.count_nonzero(mask[:, 310:]) == 0


def test_current_frame_is_blurred(differ, uniform_frame):
    reference = uniform_frame(0)
    current = uniform_frame(0)
    # A single hot pixel is spread out by the blur and falls below the threshold
    current[240, 320] = 255

    assert np.count_nonzero(differ.diff(reference, current)) == 0


def test_dimension_mismatch_raises(differ, uniform_frame):
    with pytest.raises(DimensionMismatch) as excinfo:
        differ.diff(uniform_frame(0, 64, 48), uniform_frame(0, 32, 48))

    assert isinstance(excinfo.value, InvalidInput)
    assert excinfo.value.expected == (48, 64)
    assert excinfo.value.actual == (48, 32)


@pytest.mark.parametrize("reference, current", [
    (None, np.zeros((4, 4), dtype=np.uint8)),
    (np.zeros((4, 4), dtype=np.uint8), None),
    (np.empty((0, 0), dtype=np.uint8), np.zeros((4, 4), dtype=np.uint8)),
])
def test_missing_input_gives_empty_result(differ, reference, current):
    mask = differ.diff(reference, current)
    assert mask.size == 0
    assert not has_data(mask)


def test_color_frames_are_converted():
    frame = np.zeros((10, 12, 3), dtype=np.uint8)
    frame[:, :, 1] = 200

    gray = to_grayscale(frame)

    assert gray.shape == (10, 12)
    assert gray.dtype == np.uint8
    assert gray[0, 0] > 0


def test_unsupported_shape_rejected():
    with pytest.raises(InvalidInput):
        to_grayscale(np.zeros((2, 2, 2, 2), dtype=np.uint8))


@pytest.mark.parametrize("kwargs", [{"blur": 4}, {"blur": 0}, {"threshold": 256}, {"threshold": -1}])
def test_invalid_parameters_rejected(kwargs):
    with pytest.raises(InvalidInput):
        FrameDiffer(**kwargs)
