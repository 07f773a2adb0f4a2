"""
Utility functions for the motion grid system.
"""

import logging
import math
import time
from typing import Tuple, Union

import pygame

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level="INFO"):
  """
  Configure the root logger for the application.

  Args:
      level: Level name or number
  """
  if isinstance(level, str):
    level = logging.getLevelName(level.upper())
    if not isinstance(level, int):
      level = logging.INFO
  logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def normalized_to_pixel_coordinates(
    normalized_x: float, normalized_y: float, image_width: int,
    image_height: int) -> Union[None, Tuple[int, int]]:
  """Converts a normalized [0, 1] position to pixel coordinates on a surface."""

  def is_valid_normalized_value(value: float) -> bool:
    return (value > 0 or math.isclose(0, value)) and (value < 1 or math.isclose(1, value))

  if not (is_valid_normalized_value(normalized_x) and
          is_valid_normalized_value(normalized_y)):
    return None
  x_px = min(math.floor(normalized_x * image_width), image_width - 1)
  y_px = min(math.floor(normalized_y * image_height), image_height - 1)
  return x_px, y_px


def fps_counter(last_time, frame_count):
  """
  Calculate frames per second.

  Args:
      last_time: Last time measurement
      frame_count: Frames rendered since last_time

  Returns:
      float: Current FPS
  """
  elapsed = time.time() - last_time

  # Avoid division by zero
  if elapsed <= 0:
    return 0

  return frame_count / elapsed


def draw_tech_text(surface, text, position, font_size=16, color=(0, 255, 255),
                   shadow=True, shadow_color=(0, 50, 100)):
  """
  Draw text with an optional drop shadow.

  Args:
      surface: Pygame surface to draw on
      text: Text to draw
      position: (x, y) position
      font_size: Font size
      color: RGB color for text
      shadow: Whether to draw shadow
      shadow_color: RGB color for shadow
  """
  if not pygame.font.get_init():
    pygame.font.init()
  font = pygame.font.SysFont('monospace', font_size)

  if shadow:
    shadow_surface = font.render(text, True, shadow_color)
    surface.blit(shadow_surface, (position[0] + 1, position[1] + 1))

  text_surface = font.render(text, True, color)
  surface.blit(text_surface, position)
