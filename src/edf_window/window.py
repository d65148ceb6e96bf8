"""Maps a time window onto whole EDF data blocks and decodes them.

Planning and decoding are plain synchronous functions; the blocking and
non-blocking readers only differ in how they fetch the planned byte range.
"""

import dataclasses
import math

import numpy as np

from edf_window import errors
from edf_window import header as header_lib

# Raw samples are little-endian signed 16 bit integers.
_SAMPLE_DTYPE = np.dtype('<i2')


@dataclasses.dataclass(frozen=True)
class WindowPlan:
  """The whole data blocks covering a requested time window.

  The planned range starts at the beginning of the block holding the window
  start and spans ceil(duration / block duration) blocks, so it may cover more
  time than requested on both ends.
  """
  first_block_index: int
  blocks_to_fetch: int
  offset: int
  length: int


def check_bounds(
    header: header_lib.Header, start_time_ms: int, duration_ms: int
) -> None:
  """Raises WindowOutOfBounds if the window is not inside the recording."""
  if start_time_ms < 0 or duration_ms < 0:
    raise errors.WindowOutOfBounds(
        f'Window start and duration must be non-negative, got '
        f'start={start_time_ms}ms, duration={duration_ms}ms.'
    )
  if start_time_ms + duration_ms > header.duration_ms:
    raise errors.WindowOutOfBounds(
        f'Window [{start_time_ms}ms, {start_time_ms + duration_ms}ms) is out '
        f'of the recording bounds [0ms, {header.duration_ms}ms).'
    )
  if header.block_duration_ms <= 0:
    raise errors.WindowOutOfBounds(
        f'The recording has a block duration of {header.block_duration_ms}ms.'
    )


def plan_window(
    header: header_lib.Header, start_time_ms: int, duration_ms: int
) -> WindowPlan:
  """Returns the byte range holding the blocks covering the window.

  Args:
    header: The decoded header of the recording.
    start_time_ms: The start of the window, relative to the recording start.
    duration_ms: The duration of the window.

  Returns:
    The plan of the single range read to perform.

  Raises:
    WindowOutOfBounds: If the window exceeds the recorded duration.
  """
  check_bounds(header, start_time_ms, duration_ms)
  block_duration_ms = header.block_duration_ms
  first_block_index = start_time_ms // block_duration_ms
  blocks_to_fetch = math.ceil(duration_ms / block_duration_ms)
  bytes_per_block = header.bytes_per_block
  return WindowPlan(
      first_block_index=first_block_index,
      blocks_to_fetch=blocks_to_fetch,
      offset=header.header_byte_size + first_block_index * bytes_per_block,
      length=blocks_to_fetch * bytes_per_block,
  )


def decode_int16_le(data: bytes, count: int) -> np.ndarray:
  """Decodes count little-endian signed 16 bit samples from data.

  Raises:
    IOFailure: If data does not hold exactly count samples.
  """
  expected = count * _SAMPLE_DTYPE.itemsize
  if len(data) != expected:
    raise errors.IOFailure(
        f'Expected {expected} bytes of samples, got {len(data)}.'
    )
  if not count:
    return np.empty(0, dtype=_SAMPLE_DTYPE)
  return np.frombuffer(data, dtype=_SAMPLE_DTYPE, count=count)


def decode_window(
    header: header_lib.Header, plan: WindowPlan, data: bytes
) -> list[np.ndarray]:
  """Demultiplexes and rescales the fetched blocks, one array per channel.

  Inside the range, samples are ordered block by block, then channel by
  channel in header order, then sample by sample.

  Args:
    header: The decoded header of the recording.
    plan: The plan data was fetched for.
    data: The plan.length bytes read at plan.offset.

  Returns:
    A list with one float32 array per channel, in header order. Channel i
    holds samples_per_block(i) * plan.blocks_to_fetch values.

  Raises:
    IOFailure: If data does not hold exactly plan.length bytes.
  """
  samples_per_block = header.bytes_per_block // header_lib.SAMPLE_SIZE
  samples = decode_int16_le(data, plan.blocks_to_fetch * samples_per_block)
  blocks = samples.reshape((plan.blocks_to_fetch, samples_per_block))

  result = []
  start = 0
  for channel in header.channels:
    end = start + channel.samples_per_block
    digital = blocks[:, start:end].reshape(-1)
    result.append(channel.to_physical(digital).astype(np.float32))
    start = end
  return result
