"""Byte range sources backed by a file on the local filesystem."""

from __future__ import annotations

import asyncio
import os

from edf_window import errors
from edf_window.byte_io import base_byte_source


def _read_from_path(path: str, offset: int, length: int) -> bytes:
  # Every read opens its own handle so concurrent callers never share a
  # file position.
  try:
    with open(path, 'rb') as f:
      f.seek(offset)
      data = f.read(length)
  except OSError as e:
    raise errors.IOFailure(
        f'Failed reading {length} bytes at offset {offset} from {path}.'
    ) from e
  if len(data) != length:
    raise errors.IOFailure(
        f'{path} holds only {len(data)} of the {length} bytes requested at '
        f'offset {offset}.'
    )
  return data


class _LocalFile:
  """Path handling shared by the local sources."""

  def __init__(self, path: str, check_path: bool = True):
    """Instantiates a new source.

    Args:
      path: The path of the file.
      check_path: If True, checks that the given path exists.

    Raises:
      FileNotFoundError: In case of check_path and the file doesn't exist.
    """
    self.path = os.fspath(path)
    self._check_path = check_path
    if check_path and not os.path.exists(self.path):
      raise FileNotFoundError(f'The path {self.path} cannot be found.')

  def __repr__(self) -> str:
    return f'{self.__class__.__name__}({self.path!r})'

  def __reduce__(self):
    # Pickled by path.
    return self.__class__, (self.path, self._check_path)


class LocalFileSource(_LocalFile, base_byte_source.ByteRangeSource):
  """Reads byte ranges from a local file, blocking the caller."""

  def read(self, offset: int, length: int) -> bytes:
    return _read_from_path(self.path, offset, length)


class AsyncLocalFileSource(
    _LocalFile, base_byte_source.AsyncByteRangeSource
):
  """Reads byte ranges from a local file in a worker thread."""

  async def read(self, offset: int, length: int) -> bytes:
    return await asyncio.to_thread(_read_from_path, self.path, offset, length)
