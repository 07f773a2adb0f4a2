"""
Exception types for the motion grid pipeline.
"""


class MotionGridError(Exception):
  """Base class for all motion grid errors."""


class InvalidInput(MotionGridError, ValueError):
  """A frame or mask passed to the core violates its preconditions."""


class DimensionMismatch(InvalidInput):
  """Two frames (or a mask and the canvas) do not have the same shape."""

  def __init__(self, expected, actual):
    self.expected = tuple(expected)
    self.actual = tuple(actual)
    super().__init__(f"Dimension mismatch: expected {self.expected}, got {self.actual}")


class ConfigError(MotionGridError, ValueError):
  """Invalid configuration, raised at setup before the pipeline starts."""


class AcquisitionUnavailable(MotionGridError):
  """The frame source could not be opened or stopped producing frames."""


class TransportBindFailure(MotionGridError):
  """The outbound OSC socket could not be bound."""

  def __init__(self, host, port, reason):
    self.host = host
    self.port = port
    self.reason = reason
    super().__init__(f"Error binding {host}:{port}: {reason}")
