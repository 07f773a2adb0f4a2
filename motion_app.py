#!/usr/bin/env -S uv run

# /// script
# requires-python = ">=3.10"
# dependencies = [
#   "opencv-python>=4.8.0",
#   "numpy>=1.24.0",
#   "pydantic>=2.0.0",
#   "pygame>=2.5.0",
#   "python-osc>=1.8.0",
#   "pyyaml>=6.0.2"
# ]
# ///

import argparse
import logging
import sys
import time

import pygame

from motiongrid.capture import FrameSource
from motiongrid.config import load_config
from motiongrid.differ import has_data
from motiongrid.errors import AcquisitionUnavailable, ConfigError, TransportBindFailure
from motiongrid.events import Command, EventQueue
from motiongrid.motion import MotionPipeline
from motiongrid.osc import OscSender
from motiongrid.render import GridOverlay
from motiongrid.utils import draw_tech_text, fps_counter, setup_logging

_LOGGER = logging.getLogger(__name__)

KEY_COMMANDS = {
  pygame.K_SPACE: Command.CAPTURE_BACKGROUND,
  pygame.K_m: Command.TOGGLE_MASK,
  pygame.K_ESCAPE: Command.QUIT,
}


class MotionGridApp:
  """Camera to OSC motion grid application."""

  def __init__(self, config=None, source=None, sender=None, headless=False):
    """
    Initialize the application.

    Args:
        config: MotionConfig, loaded from the default location if omitted
        source: Frame source, built from the config if omitted
        sender: OSC sender, built and bound from the config if omitted
        headless: Skip creating a window (no rendering)

    Raises:
        TransportBindFailure: If the OSC socket cannot be bound
    """
    self.config = config or load_config()
    self.headless = headless

    # Grid geometry is validated before anything starts ticking
    self.pipeline = MotionPipeline.from_config(self.config)
    self.events = EventQueue()

    self.sender = sender or OscSender(
      local_port=self.config.local_port,
      dest_host=self.config.dest_host,
      dest_port=self.config.dest_port
    )
    if not self.sender.bound:
      self.sender.bind()

    self.source = source or FrameSource(
      self.config.source, self.config.canvas_width, self.config.canvas_height
    )
    self.setup_camera()

    self.show_mask = self.config.show_mask
    self.capture_pending = self.config.capture_on_start
    self.screen = None
    self.overlay = None
    if not headless:
      self.setup_display()

    # Application status
    self.running = False
    self.start_time = time.time()
    self.last_time = time.time()
    self.frame_count = 0
    self.fps = 0

  def setup_camera(self):
    """Open the frame source; the app keeps running without one."""
    try:
      self.source.open()
    except AcquisitionUnavailable as e:
      _LOGGER.warning("%s; running without motion input", e)

  def setup_display(self):
    """Setup pygame display and the grid overlay."""
    pygame.init()

    self.display_width = self.config.display_width or self.config.canvas_width
    self.display_height = self.config.display_height or self.config.canvas_height

    self.screen = pygame.display.set_mode((self.display_width, self.display_height))
    pygame.display.set_caption(self.config.title)
    self.clock = pygame.time.Clock()

    self.overlay = GridOverlay(
      width=self.display_width,
      height=self.display_height,
      canvas_width=self.config.canvas_width,
      canvas_height=self.config.canvas_height,
      line_color=self.config.grid_color,
      line_thickness=self.config.grid_line_thickness,
      cell_highlight_alpha=self.config.cell_highlight_alpha,
      cell_active_color=self.config.cell_active_color,
      cell_inactive_color=self.config.cell_inactive_color
    )

  def poll_input(self):
    """Translate pygame events into queued commands."""
    for event in pygame.event.get():
      if event.type == pygame.QUIT:
        self.events.push(Command.QUIT)
      elif event.type == pygame.KEYDOWN and event.key in KEY_COMMANDS:
        self.events.push(KEY_COMMANDS[event.key])

  def update(self):
    """Run one tick: acquire, aggregate and emit."""
    commands = self.events.drain()

    frame = self.source.poll()
    if self.capture_pending and has_data(frame):
      commands.insert(0, Command.CAPTURE_BACKGROUND)
      self.capture_pending = False

    signal = self.pipeline.tick(frame, commands)

    for command in commands:
      if command is Command.TOGGLE_MASK:
        self.show_mask = not self.show_mask
      elif command is Command.QUIT:
        self.running = False

    self.emit(signal)
    self.frame_count += 1
    return signal

  def emit(self, signal):
    """Send this tick's OSC messages."""
    self.sender.send_signal(self.config.square_address, signal)

    if self.config.send_elapsed_frames:
      self.sender.send_value(self.config.elapsed_frames_address, self.pipeline.tick_count)
    if self.config.send_elapsed_seconds:
      self.sender.send_value(self.config.elapsed_seconds_address, time.time() - self.start_time)

  def render(self):
    """Render the grid overlay."""
    self.screen.fill((0, 0, 0))

    aggregator = self.pipeline.aggregator
    mask = self.pipeline.mask if self.show_mask else None
    self.overlay.draw(self.screen, aggregator.cells_with_counts(),
                      winner_index=aggregator.winner.index, signal=self.pipeline.signal, mask=mask)

    # Only update FPS every second
    if time.time() - self.last_time > 1.0:
      self.fps = fps_counter(self.last_time, self.frame_count)
      self.last_time = time.time()
      self.frame_count = 0

    status = "BG set" if self.pipeline.has_background else "SPACE: capture background"
    draw_tech_text(self.screen, f"FPS: {self.fps:.1f}  {status}", (10, self.display_height - 24),
                   font_size=16, color=(0, 255, 0))

    pygame.display.flip()

  def run(self):
    """Main application loop."""
    self.running = True

    try:
      while self.running:
        if not self.headless:
          self.poll_input()

        self.update()

        if self.headless:
          time.sleep(1.0 / self.config.max_fps)
        else:
          self.render()
          self.clock.tick(self.config.max_fps)

    except KeyboardInterrupt:
      _LOGGER.info("Application interrupted by user")
    finally:
      self.cleanup()

  def cleanup(self):
    """Clean up resources."""
    self.source.release()
    self.sender.close()
    if not self.headless:
      pygame.quit()


def parse_args(argv=None):
  """Parse command line arguments."""
  # @formatter:off
  parser = argparse.ArgumentParser(description='Camera motion grid to OSC')
  parser.add_argument('--cell-count',  type=int, default=None,          help='Number of grid cells (default: 20)')
  parser.add_argument('--source',      type=str, default=None,          help='Camera index, video file or frame directory (default: 0)')
  parser.add_argument('--dest-host',   type=str, default=None,          help='OSC destination host (default: 127.0.0.1)')
  parser.add_argument('--dest-port',   type=int, default=None,          help='OSC destination port (default: 8888)')
  parser.add_argument('--local-port',  type=int, default=None,          help='Local UDP port to bind (default: 8887)')
  parser.add_argument('--log-level',   type=str, default=None,          help='Logging level (default: INFO)')
  parser.add_argument('--headless',    action='store_true',             help='Run without a window')
  parser.add_argument('--capture-on-start', action='store_true', default=None, help='Capture the first frame as background')
  parser.add_argument('--config',      type=str, default='config.yaml', help='Path to configuration file (default: config.yaml)')
  # @formatter:on

  return parser.parse_args(argv)


def main(argv=None):
  """Main entry point."""
  args = parse_args(argv)
  setup_logging(args.log_level or "INFO")

  overrides = {k: v for k, v in vars(args).items() if k not in ('config', 'headless')}

  try:
    config = load_config(args.config, **overrides)
  except ConfigError as e:
    _LOGGER.error("%s", e)
    return 2

  setup_logging(config.log_level)

  try:
    app = MotionGridApp(config, headless=args.headless)
  except TransportBindFailure as e:
    _LOGGER.error("%s", e)
    return 1

  app.run()
  return 0


if __name__ == "__main__":
  sys.exit(main())
