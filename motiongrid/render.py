#!/usr/bin/env -S uv run

# /// script
# requires-python = ">=3.10"
# dependencies = [
#   "pygame>=2.5.0",
#   "numpy>=1.24.0",
#   "pydantic>=2.0.0"
# ]
# ///

"""
Grid overlay rendering for the motion grid system.
Draws the cells, their motion counts and the change mask with pygame.
"""

import numpy as np
import pygame

from motiongrid.utils import draw_tech_text, normalized_to_pixel_coordinates


def mask_to_surface(mask, size=None):
  """
  Convert a grayscale mask (or frame) to a pygame surface.

  Args:
      mask: 2D uint8 array of shape (height, width)
      size: Optional (width, height) to scale the surface to

  Returns:
      pygame.Surface
  """
  rgb = np.repeat(np.asarray(mask, dtype=np.uint8)[:, :, np.newaxis], 3, axis=2)
  # pygame surfaces are indexed (x, y)
  surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
  if size is not None and surface.get_size() != tuple(size):
    surface = pygame.transform.scale(surface, size)
  return surface


class GridOverlay:
  """Draws the aggregator's cells, shaded by how much motion each one holds."""

  def __init__(self, width=640, height=480, canvas_width=640, canvas_height=480,
               line_color=(0, 255, 255, 150), line_thickness=1, cell_highlight_alpha=120,
               cell_active_color=(255, 200, 50), cell_inactive_color=(50, 200, 255),
               show_counts=True):
    """
    Initialize grid overlay.

    Args:
        width: Display width
        height: Display height
        canvas_width: Canvas width the cells are expressed in
        canvas_height: Canvas height the cells are expressed in
        line_color: RGBA color for cell borders
        line_thickness: Thickness of cell borders
        cell_highlight_alpha: Maximum alpha of a cell highlight
        cell_active_color: Color of the winning cell
        cell_inactive_color: Color of the other cells
        show_counts: Whether to print each cell's count
    """
    self.width = width
    self.height = height
    self.scale_x = width / canvas_width
    self.scale_y = height / canvas_height
    self.line_color = line_color
    self.line_thickness = line_thickness
    self.cell_highlight_alpha = cell_highlight_alpha
    self.cell_active_color = cell_active_color
    self.cell_inactive_color = cell_inactive_color
    self.show_counts = show_counts

    # Transparent surface the highlights are drawn on
    self.highlight_surface = pygame.Surface((width, height), pygame.SRCALPHA)

  def cell_rect(self, cell):
    """Display rectangle of a cell."""
    x, y, w, h = cell.rect
    left = round(x * self.scale_x)
    top = round(y * self.scale_y)
    right = round((x + w) * self.scale_x)
    bottom = round((y + h) * self.scale_y)
    return pygame.Rect(left, top, right - left, bottom - top)

  def draw(self, surface, cells_with_counts, winner_index=None, signal=None, mask=None):
    """
    Draw the grid overlay.

    Args:
        surface: Pygame surface to draw on
        cells_with_counts: Iterable of (cell, count) pairs
        winner_index: Index of the winning cell, highlighted in the active color
        signal: Optional MotionSignal, marked at its normalized position
        mask: Optional change mask drawn underneath the grid
    """
    if mask is not None and mask.size:
      surface.blit(mask_to_surface(mask, (self.width, self.height)), (0, 0))

    self.highlight_surface.fill((0, 0, 0, 0))

    for cell, count in cells_with_counts:
      rect = self.cell_rect(cell)
      is_winner = cell.index == winner_index and count > 0
      color = self.cell_active_color if is_winner else self.cell_inactive_color

      # Highlight proportional to the share of changed pixels
      alpha = int(self.cell_highlight_alpha * min(1.0, count / cell.area))
      if alpha > 0:
        pygame.draw.rect(self.highlight_surface, (*color, alpha), rect)

      pygame.draw.rect(self.highlight_surface, self.line_color, rect, self.line_thickness)

      if self.show_counts:
        draw_tech_text(self.highlight_surface, str(count), (rect.left + 2, rect.top + 2),
                       font_size=10, color=color, shadow=False)

    surface.blit(self.highlight_surface, (0, 0))

    if signal is not None:
      position = normalized_to_pixel_coordinates(signal.max_x, signal.max_y, self.width, self.height)
      if position is not None:
        pygame.draw.circle(surface, self.cell_active_color, position, 6, 2)


if __name__ == "__main__":
  # Simple test code: a bar of motion sweeping across the grid
  from motiongrid.grid import GridAggregator

  pygame.init()

  width, height = 640, 480
  screen = pygame.display.set_mode((width, height))
  pygame.display.set_caption("Grid Overlay Test")

  aggregator = GridAggregator(width, height, 20)
  overlay = GridOverlay(width, height, width, height)
  clock = pygame.time.Clock()

  running = True
  frame = 0
  while running:
    for event in pygame.event.get():
      if event.type == pygame.QUIT:
        running = False

    mask = np.zeros((height, width), dtype=np.uint8)
    x = (frame * 4) % width
    mask[:, x:x + 40] = 255
    signal = aggregator.count_pixels(mask)

    screen.fill((0, 0, 0))
    overlay.draw(screen, aggregator.cells_with_counts(), signal.cell_index, signal, mask)
    pygame.display.flip()

    clock.tick(30)
    frame += 1

  pygame.quit()
