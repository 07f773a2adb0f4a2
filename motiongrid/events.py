"""
Discrete input events consumed once per tick by the pipeline.
"""

from collections import deque
from enum import Enum


class Command(Enum):
  """Commands that can be raised by user input."""
  CAPTURE_BACKGROUND = "capture_background"
  TOGGLE_MASK = "toggle_mask"
  QUIT = "quit"


class EventQueue:
  """FIFO of commands, filled by the input layer and drained by the driver."""

  def __init__(self):
    self._events = deque()

  def __len__(self):
    return len(self._events)

  def push(self, command: Command):
    if not isinstance(command, Command):
      raise TypeError(f"Expected a Command, got {command!r}")
    self._events.append(command)

  def drain(self):
    """Remove and return all pending commands in arrival order."""
    events = list(self._events)
    self._events.clear()
    return events
