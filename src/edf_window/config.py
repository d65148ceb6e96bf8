"""Options controlling how EDF readers open and validate recordings."""

from __future__ import annotations

import configparser
import dataclasses
import os
from typing import Sequence

DEFAULT_SECTION = 'edf_window'

_DEFAULT_EXTENSIONS = ('.edf',)


@dataclasses.dataclass(frozen=True)
class ReaderOptions:
  """Options shared by SyncEdfReader and AsyncEdfReader.

  Attributes:
    check_path: If True, path based constructors check that the file exists.
    allowed_extensions: Extensions accepted by path based constructors. An
      empty sequence accepts any extension.
    allow_degenerate_channels: If True, channels whose digital range is empty
      are kept with a nan scale factor instead of failing the header decode.
  """
  check_path: bool = True
  allowed_extensions: Sequence[str] = _DEFAULT_EXTENSIONS
  allow_degenerate_channels: bool = False

  def __post_init__(self):
    extensions = tuple(ext.lower() for ext in self.allowed_extensions)
    object.__setattr__(self, 'allowed_extensions', extensions)

  def check_extension(self, path: str) -> None:
    """Raises ValueError if path does not have an allowed extension."""
    _, ext = os.path.splitext(path)
    if self.allowed_extensions and ext.lower() not in self.allowed_extensions:
      raise ValueError(f'Invalid file format for an EDF reader: {ext}.')

  @classmethod
  def from_config_file(
      cls, path: str, section: str = DEFAULT_SECTION
  ) -> ReaderOptions:
    """Loads options from an INI file. Missing keys keep their defaults.

    Example file:

      [edf_window]
      check_path = false
      allowed_extensions = .edf, .rec
      allow_degenerate_channels = true

    Args:
      path: The path of the INI file.
      section: The section holding the options.

    Raises:
      FileNotFoundError: If path does not exist.
    """
    config = configparser.ConfigParser()
    if not config.read(path):
      raise FileNotFoundError(f'The path {path} cannot be found.')
    if not config.has_section(section):
      return cls()

    kwargs = {}
    options = config[section]
    if 'check_path' in options:
      kwargs['check_path'] = options.getboolean('check_path')
    if 'allow_degenerate_channels' in options:
      kwargs['allow_degenerate_channels'] = options.getboolean(
          'allow_degenerate_channels'
      )
    if 'allowed_extensions' in options:
      kwargs['allowed_extensions'] = tuple(
          ext.strip() for ext in options['allowed_extensions'].split(',')
          if ext.strip()
      )
    return cls(**kwargs)
