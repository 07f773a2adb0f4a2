"""
Grid aggregation module for the motion grid pipeline.
Partitions the canvas into a row of cells and finds the cell with the most motion.
"""

from typing import Iterator, List, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict

from motiongrid.differ import CHANGED
from motiongrid.errors import ConfigError, DimensionMismatch


class Cell(BaseModel):
  """A fixed rectangular region of the canvas."""

  model_config = ConfigDict(frozen=True)

  index: int
  x: int
  y: int
  width: int
  height: int

  @property
  def area(self) -> int:
    return self.width * self.height

  @property
  def rect(self) -> Tuple[int, int, int, int]:
    """(x, y, width, height) in canvas pixels."""
    return (self.x, self.y, self.width, self.height)

  @property
  def center(self) -> Tuple[float, float]:
    """Geometric midpoint of the cell in canvas pixels."""
    return (self.x + self.width / 2.0, self.y + self.height / 2.0)


class MotionSignal(BaseModel):
  """Dominant motion of one update cycle, ready to be emitted."""

  model_config = ConfigDict(frozen=True)

  motion_value: float = 0.0
  max_x: float = 0.0
  max_y: float = 0.0
  cell_index: int = 0

  def as_osc_args(self) -> List[float]:
    """Message arguments in wire order: motion value, x, y."""
    return [float(self.motion_value), float(self.max_x), float(self.max_y)]


class GridAggregator:
  """Counts changed pixels per cell and tracks the winning cell."""

  def __init__(self, canvas_width=None, canvas_height=None, cell_count=None):
    """
    Initialize grid aggregator.

    The grid is built immediately when all three arguments are given,
    otherwise configure() must be called before counting.

    Args:
        canvas_width: Canvas width in pixels
        canvas_height: Canvas height in pixels
        cell_count: Number of cells the canvas is divided into
    """
    self.canvas_width = 0
    self.canvas_height = 0
    self.cells: Tuple[Cell, ...] = ()

    self._starts = np.zeros(0, dtype=np.intp)
    self._counts = np.zeros(0, dtype=np.int64)
    self._winner = 0

    if canvas_width is not None or canvas_height is not None or cell_count is not None:
      self.configure(canvas_width, canvas_height, cell_count)

  @property
  def configured(self) -> bool:
    return bool(self.cells)

  @property
  def cell_count(self) -> int:
    return len(self.cells)

  def configure(self, canvas_width, canvas_height, cell_count):
    """
    Divide the canvas into a single row of full-height cells.

    Every cell is canvas_width // cell_count pixels wide except the last,
    which absorbs the remainder so that the cells tile the canvas exactly.

    Raises:
        ConfigError: If a size is not a positive integer, if there are more
            cells than pixel columns, or if the grid is already configured
    """
    if self.configured:
      raise ConfigError("Grid geometry is fixed once configured")

    for name, value in (("canvas_width", canvas_width),
                        ("canvas_height", canvas_height),
                        ("cell_count", cell_count)):
      if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    if cell_count > canvas_width:
      raise ConfigError(f"cell_count ({cell_count}) exceeds canvas_width ({canvas_width})")

    canvas_width, canvas_height, cell_count = int(canvas_width), int(canvas_height), int(cell_count)
    cell_width = canvas_width // cell_count
    cells = []
    for i in range(cell_count):
      x = i * cell_width
      width = cell_width if i < cell_count - 1 else canvas_width - x
      cells.append(Cell(index=i, x=x, y=0, width=width, height=canvas_height))

    self.canvas_width = canvas_width
    self.canvas_height = canvas_height
    self.cells = tuple(cells)
    self._starts = np.array([cell.x for cell in cells], dtype=np.intp)
    self._counts = np.zeros(cell_count, dtype=np.int64)
    self._winner = 0

  def _require_configured(self):
    if not self.configured:
      raise ConfigError("GridAggregator is not configured")

  def count_pixels(self, mask):
    """
    Count changed pixels per cell and select the winning cell.

    Counts are reset every call. The winner is the cell with the greatest
    count; ties go to the lowest index.

    Args:
        mask: Change mask with the canvas dimensions

    Returns:
        MotionSignal: Signal for this mask

    Raises:
        DimensionMismatch: If the mask does not match the canvas size
    """
    self._require_configured()

    mask = np.asarray(mask)
    expected = (self.canvas_height, self.canvas_width)
    if mask.shape != expected:
      raise DimensionMismatch(expected, mask.shape)

    # One pass over the pixels: per-column counts, then summed per cell
    column_counts = np.count_nonzero(mask == CHANGED, axis=0)
    self._counts = np.add.reduceat(column_counts, self._starts).astype(np.int64)

    # argmax returns the first occurrence of the maximum
    self._winner = int(np.argmax(self._counts))
    return self.signal()

  def reset(self):
    """Zero all counts; the winner falls back to cell 0."""
    self._require_configured()
    self._counts = np.zeros(self.cell_count, dtype=np.int64)
    self._winner = 0

  @property
  def counts(self) -> np.ndarray:
    """Read-only view of the current per-cell counts."""
    view = self._counts.view()
    view.flags.writeable = False
    return view

  @property
  def winner(self) -> Cell:
    self._require_configured()
    return self.cells[self._winner]

  def get_motion_value(self) -> int:
    """Changed-pixel count of the winning cell."""
    self._require_configured()
    return int(self._counts[self._winner])

  def get_max_x_value(self) -> float:
    """Winning cell midpoint x, normalized to the canvas width."""
    return self.winner.center[0] / self.canvas_width

  def get_max_y_value(self) -> float:
    """Winning cell midpoint y, normalized to the canvas height."""
    return self.winner.center[1] / self.canvas_height

  def signal(self, normalized=False) -> MotionSignal:
    """
    Build the motion signal for the current cycle.

    Args:
        normalized: Report count / cell area instead of the raw count
    """
    value = self.get_motion_value()
    if normalized:
      value = value / self.winner.area

    return MotionSignal(
      motion_value=value,
      max_x=self.get_max_x_value(),
      max_y=self.get_max_y_value(),
      cell_index=self._winner
    )

  def cells_with_counts(self) -> Iterator[Tuple[Cell, int]]:
    """Iterate (cell, count) pairs for rendering."""
    for cell, count in zip(self.cells, self._counts):
      yield cell, int(count)

