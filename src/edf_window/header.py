"""The EDF header model and the decoding of its two raw byte regions.

An EDF file starts with a fixed 256 byte main header followed by one 256 byte
sub-header per signal. The signal sub-headers are stored field by field: all
labels first, then all transducer types, and so on. See
https://www.edfplus.info/specs/edf.html for the full format.
"""

from __future__ import annotations

import collections
import dataclasses
import datetime
import enum
import math
from typing import Optional, Sequence, Union

import more_itertools
import numpy as np

from edf_window import errors
from edf_window import field_parser

MAIN_HEADER_SIZE = 256
CHANNEL_HEADER_SIZE = 256
SAMPLE_SIZE = 2

# Widths of the main header fields, in on-disk order.
_VERSION_LENGTH = 8
_PATIENT_ID_LENGTH = 80
_RECORDING_ID_LENGTH = 80
_START_DATE_LENGTH = 8
_START_TIME_LENGTH = 8
_HEADER_SIZE_LENGTH = 8
_RESERVED_LENGTH = 44
_NUM_BLOCKS_LENGTH = 8
_BLOCK_DURATION_LENGTH = 8
_NUM_SIGNALS_LENGTH = 4

# Widths of the per-channel fields, in on-disk order.
_LABEL_LENGTH = 16
_TRANSDUCER_LENGTH = 80
_PHYSICAL_DIM_LENGTH = 8
_DEFAULT_NUMBER_LENGTH = 8
_PREFILTERING_LENGTH = 80
_CHANNEL_RESERVED_LENGTH = 32

_YEAR_BASE = 2000


class PhysicalUnit(enum.Enum):
  UNKNOWN = 'unknown'
  VOLT = 'V'
  MILLI_VOLT = 'mV'
  MICRO_VOLT = 'uV'
  NANO_VOLT = 'nV'


STRING_TO_PHYSICAL_UNIT: collections.defaultdict[str, PhysicalUnit] = (
    collections.defaultdict(lambda: PhysicalUnit.UNKNOWN)
)
STRING_TO_PHYSICAL_UNIT.update(
    {
        'V': PhysicalUnit.VOLT,
        'mV': PhysicalUnit.MILLI_VOLT,
        # µ has 2 possible unicode characters, so be ready to use both.
        'μV': PhysicalUnit.MICRO_VOLT,  # b'\xce\xbcV'
        'µV': PhysicalUnit.MICRO_VOLT,  # b'\xc2\xb5V'
        'uV': PhysicalUnit.MICRO_VOLT,
        'nV': PhysicalUnit.NANO_VOLT,
    }
)


@dataclasses.dataclass(frozen=True)
class Channel:
  """The metadata of a single recorded signal."""
  label: str
  transducer_type: str
  physical_dimension: str
  physical_minimum: float
  physical_maximum: float
  digital_minimum: int
  digital_maximum: int
  prefiltering: str
  samples_per_block: int
  scale_factor: float = dataclasses.field(init=False, compare=False)

  def __post_init__(self):
    digital_diff = self.digital_maximum - self.digital_minimum
    physical_diff = self.physical_maximum - self.physical_minimum
    scale_factor = physical_diff / digital_diff if digital_diff else math.nan
    object.__setattr__(self, 'scale_factor', scale_factor)

  @property
  def is_degenerate(self) -> bool:
    return self.digital_maximum == self.digital_minimum

  @property
  def physical_unit(self) -> PhysicalUnit:
    return STRING_TO_PHYSICAL_UNIT[self.physical_dimension]

  def sampling_frequency(self, block_duration_ms: int) -> float:
    return self.samples_per_block * 1000 / block_duration_ms

  def to_physical(
      self, digital: Union[int, np.ndarray]
  ) -> Union[float, np.ndarray]:
    """Converts raw digital samples to physical units."""
    # int16 arrays would wrap when shifted by digital_minimum.
    return (
        (np.asarray(digital, dtype=np.float64) - self.digital_minimum)
        * self.scale_factor
        + self.physical_minimum
    )


@dataclasses.dataclass(frozen=True)
class Header:
  """The decoded EDF header, shared read-only by every window read.

  Attributes:
    version: The format version tag, '0' for EDF.
    patient_id: The local patient identification.
    recording_id: The local recording identification.
    start_date: The raw start date text, dd.mm.yy.
    start_time: The raw start time text, hh.mm.ss.
    record_start_time_in_ms: The start of the recording as a UTC timestamp in
      milliseconds, 0 if the date or time fields are empty.
    header_byte_size: The byte offset at which the data blocks start.
    number_of_blocks: The number of data blocks in the file.
    block_duration_ms: The duration of one data block in milliseconds.
    number_of_signals: The number of channels.
    channels: The channels, in on-disk order.
  """
  version: str
  patient_id: str
  recording_id: str
  start_date: str
  start_time: str
  record_start_time_in_ms: int
  header_byte_size: int
  number_of_blocks: int
  block_duration_ms: int
  number_of_signals: int
  channels: tuple[Channel, ...] = ()

  @property
  def bytes_per_block(self) -> int:
    return sum(
        channel.samples_per_block * SAMPLE_SIZE for channel in self.channels
    )

  @property
  def duration_ms(self) -> int:
    return self.block_duration_ms * self.number_of_blocks

  @property
  def duration(self) -> datetime.timedelta:
    return datetime.timedelta(milliseconds=self.duration_ms)

  @property
  def start_datetime(self) -> Optional[datetime.datetime]:
    if not self.start_date or not self.start_time:
      return None
    return datetime.datetime.fromtimestamp(
        self.record_start_time_in_ms / 1000, tz=datetime.timezone.utc
    )

  @property
  def channel_labels(self) -> list[str]:
    return [channel.label for channel in self.channels]

  def channel_index(self, label: str) -> int:
    """Returns the position of the channel with the given label.

    Raises:
      ChannelNotFound: If no channel has this label.
    """
    index = more_itertools.first(
        (i for i, c in enumerate(self.channels) if c.label == label), None
    )
    if index is None:
      raise errors.ChannelNotFound(label)
    return index


def _split_integers(text: str, field_name: str) -> list[int]:
  parts = text.split('.')
  try:
    values = [int(part) for part in parts]
  except ValueError as e:
    raise errors.MalformedNumber(f'Invalid {field_name}: {text!r}.') from e
  if len(values) != 3:
    raise errors.MalformedNumber(f'Invalid {field_name}: {text!r}.')
  return values


def start_time_in_ms(start_date: str, start_time: str) -> int:
  """Returns the UTC timestamp in ms of a dd.mm.yy date and hh.mm.ss time.

  Years are interpreted as 2000 + yy. Returns 0 if either text is empty.

  Raises:
    MalformedNumber: If the texts do not describe a valid date and time.
  """
  if not start_date or not start_time:
    return 0
  day, month, year = _split_integers(start_date, 'start date')
  hour, minute, second = _split_integers(start_time, 'start time')
  try:
    start = datetime.datetime(
        _YEAR_BASE + year, month, day, hour, minute, second,
        tzinfo=datetime.timezone.utc,
    )
  except ValueError as e:
    raise errors.MalformedNumber(
        f'Invalid start date/time: {start_date!r} {start_time!r}.'
    ) from e
  return int(start.timestamp()) * 1000


def decode_main_header(raw: bytes) -> Header:
  """Decodes the fixed 256 byte main header.

  The returned header has no channels yet; see decode_channel_headers.

  Raises:
    OutOfData: If raw is shorter than 256 bytes.
    MalformedNumber: If a numeric field does not parse.
  """
  parser = field_parser.FieldParser(raw)
  version = parser.parse_text(_VERSION_LENGTH)
  patient_id = parser.parse_text(_PATIENT_ID_LENGTH)
  recording_id = parser.parse_text(_RECORDING_ID_LENGTH)
  start_date = parser.parse_text(_START_DATE_LENGTH)
  start_time = parser.parse_text(_START_TIME_LENGTH)
  header_byte_size = parser.parse_number(_HEADER_SIZE_LENGTH, int)
  number_of_blocks = parser.skip(_RESERVED_LENGTH).parse_number(
      _NUM_BLOCKS_LENGTH, int
  )
  block_duration_s = parser.parse_number(_BLOCK_DURATION_LENGTH, float)
  number_of_signals = parser.parse_number(_NUM_SIGNALS_LENGTH, int)

  if number_of_signals < 0:
    raise errors.MalformedNumber(
        f'Negative number of signals: {number_of_signals}.'
    )
  if header_byte_size < 0:
    raise errors.MalformedNumber(
        f'Negative header byte size: {header_byte_size}.'
    )

  return Header(
      version=version,
      patient_id=patient_id,
      recording_id=recording_id,
      start_date=start_date,
      start_time=start_time,
      record_start_time_in_ms=start_time_in_ms(start_date, start_time),
      header_byte_size=header_byte_size,
      number_of_blocks=number_of_blocks,
      block_duration_ms=round(block_duration_s * 1000),
      number_of_signals=number_of_signals,
  )


def channel_headers_size(header: Header) -> int:
  return header.number_of_signals * CHANNEL_HEADER_SIZE


def decode_channel_headers(
    header: Header, raw: bytes, allow_degenerate_channels: bool = False
) -> Header:
  """Decodes the signal sub-headers and returns header with its channels.

  Args:
    header: The decoded main header.
    raw: The number_of_signals * 256 bytes following the main header.
    allow_degenerate_channels: If False, a channel whose digital range is
      empty fails the decode.

  Returns:
    A new Header holding the decoded channels, in on-disk order.

  Raises:
    OutOfData: If raw is shorter than the channel headers.
    MalformedNumber: If a numeric field does not parse.
    DegenerateChannel: If a channel has digital_maximum == digital_minimum
      and allow_degenerate_channels is False.
  """
  count = header.number_of_signals
  parser = field_parser.FieldParser(raw)

  labels = parser.parse_text_list(count, _LABEL_LENGTH)
  transducer_types = parser.parse_text_list(count, _TRANSDUCER_LENGTH)
  physical_dims = parser.parse_text_list(count, _PHYSICAL_DIM_LENGTH)
  physical_mins = parser.parse_number_list(count, _DEFAULT_NUMBER_LENGTH, float)
  physical_maxs = parser.parse_number_list(count, _DEFAULT_NUMBER_LENGTH, float)
  digital_mins = parser.parse_number_list(count, _DEFAULT_NUMBER_LENGTH, int)
  digital_maxs = parser.parse_number_list(count, _DEFAULT_NUMBER_LENGTH, int)
  prefilterings = parser.parse_text_list(count, _PREFILTERING_LENGTH)
  samples_per_block = parser.parse_number_list(
      count, _DEFAULT_NUMBER_LENGTH, int
  )
  parser.skip(_CHANNEL_RESERVED_LENGTH * count)

  channels = tuple(
      Channel(*fields)
      for fields in zip(
          labels,
          transducer_types,
          physical_dims,
          physical_mins,
          physical_maxs,
          digital_mins,
          digital_maxs,
          prefilterings,
          samples_per_block,
      )
  )
  _check_channels(channels, allow_degenerate_channels)
  return dataclasses.replace(header, channels=channels)


def _check_channels(
    channels: Sequence[Channel], allow_degenerate_channels: bool
) -> None:
  for i, channel in enumerate(channels):
    if channel.is_degenerate and not allow_degenerate_channels:
      raise errors.DegenerateChannel(
          f'Channel {i} ({channel.label!r}) has an empty digital range: '
          f'{channel.digital_minimum}..{channel.digital_maximum}.'
      )
    if channel.samples_per_block < 0:
      raise errors.MalformedNumber(
          f'Channel {i} ({channel.label!r}) has a negative number of samples '
          f'per block: {channel.samples_per_block}.'
      )
