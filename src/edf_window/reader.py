"""Readers serving time windows of an EDF recording in physical units.

SyncEdfReader blocks on its byte source; AsyncEdfReader awaits it. Both decode
the header once at construction and share the same planning and decoding code
for every window.
"""

from __future__ import annotations

import logging
from typing import Generic, Optional, TypeVar

import numpy as np

from edf_window import config
from edf_window import header as header_lib
from edf_window import window
from edf_window.byte_io import byte_source

SourceT = TypeVar('SourceT')


def _resolve_options(
    options: Optional[config.ReaderOptions],
) -> config.ReaderOptions:
  return options if options is not None else config.ReaderOptions()


def _decode_channels(
    main_header: header_lib.Header,
    raw: bytes,
    options: config.ReaderOptions,
) -> header_lib.Header:
  edf_header = header_lib.decode_channel_headers(
      main_header, raw, options.allow_degenerate_channels
  )
  logging.debug(
      'Decoded EDF header: %d channels, %d blocks of %dms, %d bytes per block.',
      edf_header.number_of_signals,
      edf_header.number_of_blocks,
      edf_header.block_duration_ms,
      edf_header.bytes_per_block,
  )
  return edf_header


class _BaseEdfReader(Generic[SourceT]):
  """State shared by the blocking and non-blocking readers."""

  def __init__(
      self,
      source: SourceT,
      edf_header: header_lib.Header,
      options: config.ReaderOptions,
  ):
    self._source = source
    self._header = edf_header
    self._options = options

  @property
  def header(self) -> header_lib.Header:
    """The decoded header. It is immutable and shared by every read."""
    return self._header

  @property
  def source(self) -> SourceT:
    return self._source

  @property
  def options(self) -> config.ReaderOptions:
    return self._options

  def __repr__(self) -> str:
    return (
        f'{self.__class__.__name__}({self._source!r}, '
        f'channels={self._header.number_of_signals}, '
        f'duration_ms={self._header.duration_ms})'
    )

  def _plan(self, start_time_ms: int, duration_ms: int) -> window.WindowPlan:
    plan = window.plan_window(self._header, start_time_ms, duration_ms)
    logging.debug(
        'Reading window [%dms, +%dms): %d blocks from block %d, %d bytes at '
        'offset %d.',
        start_time_ms,
        duration_ms,
        plan.blocks_to_fetch,
        plan.first_block_index,
        plan.length,
        plan.offset,
    )
    return plan


class SyncEdfReader(_BaseEdfReader[byte_source.ByteRangeSource]):
  """Reads EDF windows through a blocking byte source."""

  def __init__(
      self,
      source: byte_source.ByteRangeSource,
      options: Optional[config.ReaderOptions] = None,
  ):
    """Reads and decodes the header of the recording behind source.

    Args:
      source: The blocking source of the EDF bytes.
      options: Decoding options, defaults to config.ReaderOptions().

    Raises:
      IOFailure: If the header bytes cannot be read.
      OutOfData: If the header is truncated.
      MalformedNumber: If a numeric header field does not parse.
      DegenerateChannel: If a channel has an empty digital range.
    """
    options = _resolve_options(options)
    main_header = header_lib.decode_main_header(
        source.read_exact(0, header_lib.MAIN_HEADER_SIZE)
    )
    raw_channels = source.read_exact(
        header_lib.MAIN_HEADER_SIZE,
        header_lib.channel_headers_size(main_header),
    )
    super().__init__(
        source, _decode_channels(main_header, raw_channels, options), options
    )

  @classmethod
  def from_path(
      cls, path: str, options: Optional[config.ReaderOptions] = None
  ) -> SyncEdfReader:
    """Opens the EDF file at path.

    Raises:
      FileNotFoundError: If options.check_path and the file doesn't exist.
      ValueError: If the extension is not allowed by options.
    """
    options = _resolve_options(options)
    options.check_extension(path)
    source = byte_source.LocalFileSource(path, check_path=options.check_path)
    return cls(source, options)

  def read_window(
      self, start_time_ms: int, duration_ms: int
  ) -> list[np.ndarray]:
    """Returns the samples of the blocks covering a time window.

    The window is widened to whole data blocks: it starts at the beginning of
    the block holding start_time_ms and spans ceil(duration_ms / block
    duration) blocks.

    Args:
      start_time_ms: The window start, relative to the recording start.
      duration_ms: The window duration.

    Returns:
      One float32 array of physical values per channel, in header order.

    Raises:
      WindowOutOfBounds: If the window exceeds the recording. Nothing is read.
      IOFailure: If the data bytes cannot be read.
    """
    plan = self._plan(start_time_ms, duration_ms)
    data = self._source.read_exact(plan.offset, plan.length)
    return window.decode_window(self._header, plan, data)


class AsyncEdfReader(_BaseEdfReader[byte_source.AsyncByteRangeSource]):
  """Reads EDF windows through a non-blocking byte source.

  Instances are built with `await AsyncEdfReader.create(source)`, which
  suspends only while the header bytes are fetched.
  """

  @classmethod
  async def create(
      cls,
      source: byte_source.AsyncByteRangeSource,
      options: Optional[config.ReaderOptions] = None,
  ) -> AsyncEdfReader:
    """Reads and decodes the header of the recording behind source.

    Raises:
      IOFailure: If the header bytes cannot be read.
      OutOfData: If the header is truncated.
      MalformedNumber: If a numeric header field does not parse.
      DegenerateChannel: If a channel has an empty digital range.
    """
    options = _resolve_options(options)
    main_header = header_lib.decode_main_header(
        await source.read_exact(0, header_lib.MAIN_HEADER_SIZE)
    )
    raw_channels = await source.read_exact(
        header_lib.MAIN_HEADER_SIZE,
        header_lib.channel_headers_size(main_header),
    )
    return cls(
        source, _decode_channels(main_header, raw_channels, options), options
    )

  @classmethod
  async def from_path(
      cls, path: str, options: Optional[config.ReaderOptions] = None
  ) -> AsyncEdfReader:
    """Opens the EDF file at path. See SyncEdfReader.from_path."""
    options = _resolve_options(options)
    options.check_extension(path)
    source = byte_source.AsyncLocalFileSource(
        path, check_path=options.check_path
    )
    return await cls.create(source, options)

  async def read_window(
      self, start_time_ms: int, duration_ms: int
  ) -> list[np.ndarray]:
    """Returns the samples of the blocks covering a time window.

    See SyncEdfReader.read_window.
    """
    plan = self._plan(start_time_ms, duration_ms)
    data = await self._source.read_exact(plan.offset, plan.length)
    return window.decode_window(self._header, plan, data)
