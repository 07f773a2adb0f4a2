#!/usr/bin/env python

"""
Configuration module for the motion grid pipeline.
Handles loading configuration from YAML files or creating defaults.
"""

import logging
import os
from typing import Literal, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from motiongrid.errors import ConfigError

_LOGGER = logging.getLogger(__name__)


class MotionConfig(BaseModel):
  """Configuration model for the motion grid pipeline."""

  # Application settings
  title: str = "Motion Grid"
  source: Union[str, int] = 0
  max_fps: int = Field(default=30, gt=0)
  log_level: str = "INFO"

  # Canvas settings (frames are resized to this resolution)
  canvas_width: int = Field(default=640, gt=0)
  canvas_height: int = Field(default=480, gt=0)

  # Differencing settings
  diff_threshold: int = Field(default=50, ge=0, le=255)
  blur_kernel: int = Field(default=5, gt=0)
  reference_mode: Literal["background", "previous"] = "background"

  # Grid settings
  cell_count: int = Field(default=20, gt=0)
  grid_color: Tuple[int, int, int, int] = (0, 255, 255, 150)  # Cyan with alpha
  grid_line_thickness: int = 1
  cell_highlight_alpha: int = 120
  cell_active_color: Tuple[int, int, int] = (255, 200, 50)
  cell_inactive_color: Tuple[int, int, int] = (50, 200, 255)
  show_mask: bool = False
  capture_on_start: bool = False  # Capture the first frame as background (for headless runs)

  # Signal settings
  hold_last_signal: bool = True
  normalize_motion_value: bool = False

  # OSC transport settings
  local_port: int = Field(default=8887, gt=0, lt=65536)
  dest_host: str = "127.0.0.1"
  dest_port: int = Field(default=8888, gt=0, lt=65536)
  square_address: str = "/OpticalFlowExample/Square"
  elapsed_frames_address: str = "/OpticalFlowExample/elapsedFrames"
  elapsed_seconds_address: str = "/OpticalFlowExample/elapsedSeconds"
  send_elapsed_frames: bool = False
  send_elapsed_seconds: bool = False

  # Display settings
  display_width: Optional[int] = None
  display_height: Optional[int] = None

  @field_validator("blur_kernel")
  @classmethod
  def _odd_kernel(cls, value):
    if value % 2 == 0:
      raise ValueError(f"blur_kernel must be odd, got {value}")
    return value

  @field_validator("square_address", "elapsed_frames_address", "elapsed_seconds_address")
  @classmethod
  def _osc_address(cls, value):
    if not value.startswith("/"):
      raise ValueError(f"OSC address must start with '/', got {value!r}")
    return value

  @model_validator(mode="after")
  def _cells_fit_canvas(self):
    # Every cell needs at least one pixel column
    if self.cell_count > self.canvas_width:
      raise ValueError(
        f"cell_count ({self.cell_count}) exceeds canvas_width ({self.canvas_width})"
      )
    return self


def load_config(config_path: str = None, **overrides) -> MotionConfig:
  """
  Load configuration from YAML file or create default.

  Args:
      config_path: Path to configuration YAML file
      **overrides: Values applied on top of the file (e.g. from the command line)

  Returns:
      MotionConfig: Validated configuration object

  Raises:
      ConfigError: If the file cannot be parsed or a value is invalid
  """
  values = {}

  # If config path is provided, try to load from file
  if config_path and os.path.exists(config_path):
    try:
      with open(config_path, 'r') as f:
        yaml_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
      raise ConfigError(f"Error loading configuration from {config_path}: {e}") from e

    if yaml_config is not None and not isinstance(yaml_config, dict):
      raise ConfigError(f"Configuration in {config_path} must be a mapping")

    # Update config with known values from YAML
    for key, value in (yaml_config or {}).items():
      if key in MotionConfig.model_fields:
        values[key] = value
      else:
        _LOGGER.warning("Ignoring unknown configuration key %r in %s", key, config_path)
  elif config_path:
    _LOGGER.info("Configuration file %s not found, using defaults", config_path)

  values.update({k: v for k, v in overrides.items() if v is not None})

  try:
    return MotionConfig(**values)
  except ValidationError as e:
    raise ConfigError(f"Invalid configuration: {e}") from e


def save_config(config: MotionConfig, config_path: str = "config.yaml"):
  """
  Save configuration to YAML file.

  Args:
      config: Configuration object
      config_path: Path to save configuration YAML file
  """
  config_dict = config.model_dump(mode="json")

  with open(config_path, 'w') as f:
    yaml.safe_dump(config_dict, f, default_flow_style=False)

  _LOGGER.info("Configuration saved to %s", config_path)


def create_default_config(config_path: str = "config.yaml"):
  """
  Create and save default configuration to YAML file.

  Args:
      config_path: Path to save configuration YAML file
  """
  config = MotionConfig()
  save_config(config, config_path)
  return config
