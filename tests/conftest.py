import os
import socket

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

CANVAS_WIDTH = 640
CANVAS_HEIGHT = 480


@pytest.fixture
def blank_mask():
    return np.zeros((CANVAS_HEIGHT, CANVAS_WIDTH), dtype=np.uint8)


@pytest.fixture
def band_mask():
    """Factory for a mask that is fully changed in columns [x0, x1)."""
    def make(x0, x1, value=255):
        mask = np.zeros((CANVAS_HEIGHT, CANVAS_WIDTH), dtype=np.uint8)
        mask[:, x0:x1] = value
        return mask
    return make


@pytest.fixture
def uniform_frame():
    def make(value, width=CANVAS_WIDTH, height=CANVAS_HEIGHT):
        return np.full((height, width), value, dtype=np.uint8)
    return make


@pytest.fixture
def udp_receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()
