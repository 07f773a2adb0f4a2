"""
Motion pipeline module for the motion grid system.
Drives differencing and grid aggregation once per tick.
"""

import logging

from motiongrid.differ import FrameDiffer, has_data, to_grayscale
from motiongrid.errors import DimensionMismatch
from motiongrid.events import Command
from motiongrid.grid import GridAggregator

_LOGGER = logging.getLogger(__name__)

BACKGROUND = "background"
PREVIOUS = "previous"


class MotionPipeline:
    """Turns incoming frames into one MotionSignal per tick."""

    def __init__(self, canvas_width=640, canvas_height=480, cell_count=20,
                 threshold=50, blur=5, reference_mode=BACKGROUND,
                 hold_last_signal=True, normalize_motion_value=False):
        """
        Initialize motion pipeline.

        Args:
            canvas_width: Width every frame must have
            canvas_height: Height every frame must have
            cell_count: Number of grid cells across the canvas
            threshold: Differencing threshold (0-255)
            blur: Gaussian blur kernel size
            reference_mode: "background" to difference against the captured
                background, "previous" to difference against the last frame
            hold_last_signal: Keep the last signal on ticks without a frame,
                otherwise fall back to the zero-count signal
            normalize_motion_value: Report count / cell area instead of count
        """
        if reference_mode not in (BACKGROUND, PREVIOUS):
            raise ValueError(f"Unknown reference mode: {reference_mode!r}")

        self.differ = FrameDiffer(threshold=threshold, blur=blur)
        self.aggregator = GridAggregator(canvas_width, canvas_height, cell_count)
        self.reference_mode = reference_mode
        self.hold_last_signal = hold_last_signal
        self.normalize_motion_value = normalize_motion_value

        # Frame storage
        self.current_frame = None
        self.previous_frame = None
        self.background = None
        self.mask = None

        self.signal = self.aggregator.signal(normalized=normalize_motion_value)
        self.tick_count = 0

    @classmethod
    def from_config(cls, config):
        """Build a pipeline from a MotionConfig."""
        return cls(
            canvas_width=config.canvas_width,
            canvas_height=config.canvas_height,
            cell_count=config.cell_count,
            threshold=config.diff_threshold,
            blur=config.blur_kernel,
            reference_mode=config.reference_mode,
            hold_last_signal=config.hold_last_signal,
            normalize_motion_value=config.normalize_motion_value
        )

    @property
    def has_background(self):
        return self.background is not None

    def capture_background(self):
        """
        Snapshot the current frame, blurred, as the new background.

        Returns:
            bool: True if a background was captured
        """
        if self.current_frame is None:
            _LOGGER.warning("Cannot capture background: no frame received yet")
            return False

        # Single assignment of a fresh array; readers never see a partial frame
        self.background = self.differ.blur(self.current_frame)
        _LOGGER.info("Background captured")
        return True

    def reference(self):
        """Frame the current frame is differenced against, or None."""
        if self.reference_mode == PREVIOUS:
            return self.previous_frame
        return self.background

    def tick(self, frame=None, commands=()):
        """
        Run one update cycle.

        A tick without a frame skips differencing and aggregation. The
        signal is then held or zeroed according to hold_last_signal.

        Args:
            frame: Newly acquired frame, or None if none is ready
            commands: Commands drained from the event queue for this tick

        Returns:
            MotionSignal: Signal to emit for this tick
        """
        self.tick_count += 1
        new_frame = has_data(frame)

        if new_frame:
            gray = to_grayscale(frame)
            expected = (self.aggregator.canvas_height, self.aggregator.canvas_width)
            if gray.shape != expected:
                raise DimensionMismatch(expected, gray.shape)
            self.current_frame = gray

        for command in commands:
            if command is Command.CAPTURE_BACKGROUND:
                self.capture_background()

        if new_frame:
            self._process(self.current_frame)
        elif not self.hold_last_signal:
            self.aggregator.reset()
            self.mask = None

        self.signal = self.aggregator.signal(normalized=self.normalize_motion_value)
        return self.signal

    def _process(self, frame):
        reference = self.reference()
        if reference is not None:
            mask = self.differ.diff(reference, frame)
            if mask.size:
                self.aggregator.count_pixels(mask)
                self.mask = mask

        if self.reference_mode == PREVIOUS:
            self.previous_frame = frame
