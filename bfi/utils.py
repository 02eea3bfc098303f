"""Configuration helpers."""

import ast
import logging

import numpy as np
import yaml

from bfi.bf import DEFAULT_TAPE_LENGTH, DEFAULT_CELL_TYPE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
  'tape_length': DEFAULT_TAPE_LENGTH,
  'cell_type': DEFAULT_CELL_TYPE,
  'debug': False
}

def parse_config_string(config_str):
  config = {}
  for config_statement in config_str.split(','):
    if config_statement:
      key, value = config_statement.split('=')
      key, value = key.strip(), value.strip()
      try:
        config[key] = ast.literal_eval(value)
      except (ValueError, SyntaxError):
        # Bare words like uint8 are taken as strings
        config[key] = value
  return config

def load_config(path):
  with open(path, 'r') as f:
    config = yaml.safe_load(f)

  if config is None:
    return {}
  if not isinstance(config, dict):
    raise ValueError(f'{path} should contain a mapping, found {type(config).__name__}')
  return config

def validate_config(config):
  unknown = set(config) - set(DEFAULT_CONFIG)
  if unknown:
    raise ValueError(f'Unknown configuration keys: {", ".join(sorted(unknown))}')

  tape_length = config['tape_length']
  if isinstance(tape_length, bool) or not isinstance(tape_length, int) or tape_length < 1:
    raise ValueError(f'tape_length should be a positive integer, got {tape_length!r}')

  try:
    cell_type = np.dtype(config['cell_type'])
  except TypeError as e:
    raise ValueError(f'Unknown cell_type {config["cell_type"]!r}') from e
  if not np.issubdtype(cell_type, np.integer):
    raise ValueError(f'cell_type should be an integer type, got {cell_type}')

  return config

def make_config(config_file=None, config_str=None, **overrides):
  """Merge configuration sources. Later sources win:
  defaults, YAML file, config string, keyword overrides (None is ignored)."""
  config = dict(DEFAULT_CONFIG)

  if config_file:
    logger.debug(f'Loading configuration from {config_file}')
    config.update(load_config(config_file))
  if config_str:
    config.update(parse_config_string(config_str))
  config.update({key: value for key, value in overrides.items() if value is not None})

  return validate_config(config)
