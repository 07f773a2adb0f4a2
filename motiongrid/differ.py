"""
Frame differencing module for the motion grid pipeline.
Turns a reference frame and a current frame into a binary change mask.
"""

import cv2
import numpy as np

from motiongrid.errors import DimensionMismatch, InvalidInput

CHANGED = 255
UNCHANGED = 0


def has_data(frame):
    """Return True if frame is an initialized, non-empty image."""
    return frame is not None and np.asarray(frame).size > 0


def to_grayscale(frame):
    """
    Convert a frame to a single-channel 8-bit image.

    Args:
        frame: BGR, BGRA or single-channel image

    Returns:
        2D uint8 numpy array
    """
    frame = np.asarray(frame)
    if frame.ndim == 3 and frame.shape[2] == 1:
        frame = frame[:, :, 0]
    elif frame.ndim == 3 and frame.shape[2] == 4:
        frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    elif frame.ndim == 3:
        frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    elif frame.ndim != 2:
        raise InvalidInput(f"Unsupported frame shape {frame.shape}")

    if frame.dtype != np.uint8:
        frame = np.clip(frame, 0, 255).astype(np.uint8)
    return frame


class FrameDiffer:
    """Blur, absolute difference and threshold against a reference frame."""

    def __init__(self, threshold=50, blur=5):
        """
        Initialize frame differ.

        Args:
            threshold: Intensity difference above which a pixel counts as changed
            blur: Gaussian blur kernel size (odd) applied to the current frame
        """
        if blur <= 0 or blur % 2 == 0:
            raise InvalidInput(f"Blur kernel must be a positive odd integer, got {blur}")
        if not 0 <= threshold <= 255:
            raise InvalidInput(f"Threshold must be within [0, 255], got {threshold}")

        self.threshold = threshold
        self.blur_size = blur

    def blur(self, frame):
        """Apply the smoothing blur used for both the background and the current frame."""
        return cv2.GaussianBlur(to_grayscale(frame), (self.blur_size, self.blur_size), 0)

    def diff(self, reference, current):
        """
        Compute the change mask of current against reference.

        Args:
            reference: Reference (background or previous) grayscale frame
            current: Current frame, blurred before differencing

        Returns:
            uint8 mask with 255 where the pixel changed and 0 elsewhere, or an
            empty array if either input has no data

        Raises:
            DimensionMismatch: If the two frames differ in size
        """
        if not has_data(reference) or not has_data(current):
            return np.empty((0, 0), dtype=np.uint8)

        reference = to_grayscale(reference)
        current = to_grayscale(current)
        if reference.shape != current.shape:
            raise DimensionMismatch(reference.shape, current.shape)

        delta = cv2.absdiff(self.blur(current), reference)
        # Strictly greater: a difference equal to the threshold is unchanged
        _, mask = cv2.threshold(delta, self.threshold, CHANGED, cv2.THRESH_BINARY)
        return mask
