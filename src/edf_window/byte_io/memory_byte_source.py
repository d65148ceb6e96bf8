"""Byte range sources over a buffer already held in memory.

Useful when the container was fetched by other means, e.g. downloaded or
received from a browser upload.
"""

from edf_window import errors
from edf_window.byte_io import base_byte_source


def _slice(data: bytes, offset: int, length: int) -> bytes:
  if offset < 0 or length < 0 or offset + length > len(data):
    raise errors.IOFailure(
        f'Range [{offset}, {offset + length}) is outside a buffer of '
        f'{len(data)} bytes.'
    )
  return data[offset:offset + length]


class InMemorySource(base_byte_source.ByteRangeSource):
  """Serves byte ranges of an in-memory buffer."""

  def __init__(self, data: bytes):
    self._data = bytes(data)

  def __len__(self) -> int:
    return len(self._data)

  def read(self, offset: int, length: int) -> bytes:
    return _slice(self._data, offset, length)


class AsyncInMemorySource(base_byte_source.AsyncByteRangeSource):
  """Serves byte ranges of an in-memory buffer through coroutines."""

  def __init__(self, data: bytes):
    self._data = bytes(data)

  def __len__(self) -> int:
    return len(self._data)

  async def read(self, offset: int, length: int) -> bytes:
    return _slice(self._data, offset, length)
