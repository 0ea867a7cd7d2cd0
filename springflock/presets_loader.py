#!/usr/bin/env python3
"""
Flock preset JSON loading utilities.

Presets live in springflock/presets/*.json. Each file describes one flock:

{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "seed": 1234,                       # optional; pins every random draw
  "members": 40,                      # bodies created around the focus
  "spring_length": [30, 60],          # [min, max] in pixels
  "spring_constant": [0.005, 0.02],   # [min, max]
  "magnetic_force": 1.0,
  "focus_speed": 0.003,
  "body_size": 3.0,
  "draw_size": 10.0,
  "max_speed": 9.0,
  "speed_threshold": 0.0,
  "mode": "ellipse",                  # dot | ellipse | tail
  "follows_pointer": false,
  "colors": {                         # [at rest, at max speed] per channel
    "red": [0, 255], "green": [90, 110], "blue": [118, 138], "alpha": [230, 180]
  }
}

Every key is optional; missing or malformed values fall back to the defaults in
FlockConfig. Users can drop their own JSON files into the folder and they'll be
picked up by the loader.
"""
import json
import logging
import os
from typing import List, Optional, Tuple

from .data_models import ColorRange, DrawMode, FlockConfig

logger = logging.getLogger(__name__)

PRESETS_DIR = os.path.join(os.path.dirname(__file__), "presets")


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      data = json.load(f)
  except (OSError, ValueError) as exc:
    logger.warning("Could not read preset %s: %s", path, exc)
    return None
  if not isinstance(data, dict):
    logger.warning("Preset %s is not a JSON object", path)
    return None
  return data


def _coerce_channel(c, default: Tuple[int, int]) -> Tuple[int, int]:
  try:
    lo, hi = int(c[0]), int(c[1])
  except (TypeError, ValueError, IndexError):
    return default
  return (max(0, min(255, lo)), max(0, min(255, hi)))


def _coerce_range(r, default: Tuple[float, float]) -> Tuple[float, float]:
  try:
    return (float(r[0]), float(r[1]))
  except (TypeError, ValueError, IndexError):
    return default


def _coerce_colors(data) -> ColorRange:
  base = ColorRange()
  if not isinstance(data, dict):
    return base
  return ColorRange(
    red=_coerce_channel(data.get("red"), base.red),
    green=_coerce_channel(data.get("green"), base.green),
    blue=_coerce_channel(data.get("blue"), base.blue),
    alpha=_coerce_channel(data.get("alpha"), base.alpha),
  )


def config_from_dict(data: dict, default_name: str = "Preset") -> FlockConfig:
  """Build a clamped FlockConfig from a parsed preset object."""
  base = FlockConfig()
  cfg = FlockConfig(name=str(data.get("name") or default_name),
                    description=str(data.get("description") or ""))

  seed = data.get("seed")
  cfg.seed = int(seed) if isinstance(seed, (int, float)) and not isinstance(seed, bool) else None

  try:
    cfg.members = int(data.get("members", base.members))
  except (TypeError, ValueError):
    logger.warning("Ignoring bad 'members' in preset %r", cfg.name)

  for key in ("magnetic_force", "focus_speed", "body_size", "draw_size",
              "max_speed", "speed_threshold", "focus_seed_x", "focus_seed_y",
              "oscillation_seed"):
    if key not in data:
      continue
    try:
      setattr(cfg, key, float(data[key]))
    except (TypeError, ValueError):
      logger.warning("Ignoring bad %r in preset %r", key, cfg.name)

  cfg.spring_length_min, cfg.spring_length_max = _coerce_range(
    data.get("spring_length"), (base.spring_length_min, base.spring_length_max))
  cfg.spring_constant_min, cfg.spring_constant_max = _coerce_range(
    data.get("spring_constant"), (base.spring_constant_min, base.spring_constant_max))

  if "mode" in data:
    try:
      cfg.mode = DrawMode.parse(data["mode"])
    except (KeyError, ValueError, TypeError):
      logger.warning("Unknown draw mode %r in preset %r", data["mode"], cfg.name)

  cfg.follows_pointer = bool(data.get("follows_pointer", False))
  cfg.colors = _coerce_colors(data.get("colors"))
  return cfg.clamped()


def list_presets(directory: str = PRESETS_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available presets."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(directory):
    return items
  for fn in sorted(os.listdir(directory)):
    if not fn.lower().endswith(".json"):
      continue
    data = _read_json(os.path.join(directory, fn)) or {}
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_preset(file_name: str, directory: str = PRESETS_DIR) -> Optional[FlockConfig]:
  """Load a preset JSON by file name; None if it cannot be read."""
  data = _read_json(os.path.join(directory, file_name))
  if data is None:
    return None
  return config_from_dict(data, default_name=os.path.splitext(file_name)[0])
