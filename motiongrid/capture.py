"""
Frame acquisition module for the motion grid system.
Wraps a camera, video file or directory of frames and delivers canvas-sized
grayscale frames on demand.
"""

import logging
import os

import cv2

from motiongrid.differ import to_grayscale
from motiongrid.errors import AcquisitionUnavailable

_LOGGER = logging.getLogger(__name__)


class FrameSource:
  """Poll-based frame source; a failed read yields None instead of raising."""

  def __init__(self, source=0, width=640, height=480):
    """
    Initialize frame source.

    Args:
        source: Camera index, video file path or directory of .jpg frames
        width: Canvas width frames are resized to
        height: Canvas height frames are resized to
    """
    if isinstance(source, str) and source.isdigit():
      source = int(source)

    self.source = source
    self.width = width
    self.height = height

    self.cap = None
    self.frame_paths = []
    self.current_frame_index = 0
    self.available = False

  @property
  def is_directory(self):
    return isinstance(self.source, str) and os.path.isdir(self.source)

  @property
  def is_file(self):
    return isinstance(self.source, str) and not self.is_directory

  def open(self):
    """
    Open the underlying source.

    Raises:
        AcquisitionUnavailable: If the source cannot be opened
    """
    if self.is_directory:
      self.frame_paths = sorted(
        os.path.join(self.source, f) for f in os.listdir(self.source) if f.endswith('.jpg')
      )
      if not self.frame_paths:
        raise AcquisitionUnavailable(f"No jpg files found in {self.source}")
      self.current_frame_index = 0
    else:
      self.cap = cv2.VideoCapture(self.source)
      if not self.cap.isOpened():
        self.cap.release()
        self.cap = None
        raise AcquisitionUnavailable(f"Could not open camera/video source: {self.source}")

      # Request the canvas resolution; frames are resized anyway
      self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
      self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

    self.available = True
    _LOGGER.info("Opened frame source %s", self.source)

  def poll(self):
    """
    Get the next frame if one is available.

    Returns:
        Canvas-sized grayscale frame, or None if no frame could be read
    """
    frame = self._read()
    if frame is None:
      if self.available:
        _LOGGER.warning("No frame available from %s, skipping", self.source)
      self.available = False
      return None

    if not self.available:
      _LOGGER.info("Frame source %s recovered", self.source)
    self.available = True
    return self.prepare(frame)

  def prepare(self, frame):
    """Convert a raw frame to grayscale at the canvas resolution."""
    gray = to_grayscale(frame)
    if gray.shape != (self.height, self.width):
      gray = cv2.resize(gray, (self.width, self.height), interpolation=cv2.INTER_AREA)
    return gray

  def _read(self):
    if self.frame_paths:
      frame_path = self.frame_paths[self.current_frame_index]
      # Cycle through all frames
      self.current_frame_index = (self.current_frame_index + 1) % len(self.frame_paths)
      frame = cv2.imread(frame_path)
      if frame is None:
        _LOGGER.debug("Error reading frame: %s", frame_path)
      return frame

    if self.cap is None:
      return None

    ret, frame = self.cap.read()

    # If video file has ended, loop back to beginning
    if not ret and self.is_file:
      self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
      ret, frame = self.cap.read()

    return frame if ret else None

  def release(self):
    """Release the capture device."""
    if self.cap is not None:
      self.cap.release()
      self.cap = None
    self.available = False
