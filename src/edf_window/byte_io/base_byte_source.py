"""Abstract byte range sources, in blocking and non-blocking flavours.

A source returns the raw bytes of an arbitrary [offset, offset + length) range
of an EDF container. Implementations must be safe to call concurrently, or
serialize internally; readers do not lock around them.
"""

import abc

from edf_window import errors


def _check_range(offset: int, length: int) -> None:
  if offset < 0 or length < 0:
    raise errors.IOFailure(
        f'Invalid byte range: offset={offset}, length={length}.'
    )


def _check_length(data: bytes, offset: int, length: int) -> bytes:
  if len(data) != length:
    raise errors.IOFailure(
        f'Expected {length} bytes at offset {offset}, got {len(data)}.'
    )
  return data


class ByteRangeSource(abc.ABC):
  """A source answering byte range requests synchronously."""

  @abc.abstractmethod
  def read(self, offset: int, length: int) -> bytes:
    """Returns exactly length bytes starting at offset.

    Raises:
      IOFailure: If the underlying medium cannot supply the whole range.
    """

  def read_exact(self, offset: int, length: int) -> bytes:
    """Calls read and verifies that exactly length bytes came back."""
    _check_range(offset, length)
    return _check_length(self.read(offset, length), offset, length)


class AsyncByteRangeSource(abc.ABC):
  """A source answering byte range requests with coroutines."""

  @abc.abstractmethod
  async def read(self, offset: int, length: int) -> bytes:
    """Returns exactly length bytes starting at offset, once awaited.

    Raises:
      IOFailure: If the underlying medium cannot supply the whole range.
    """

  async def read_exact(self, offset: int, length: int) -> bytes:
    """Awaits read and verifies that exactly length bytes came back."""
    _check_range(offset, length)
    return _check_length(await self.read(offset, length), offset, length)
