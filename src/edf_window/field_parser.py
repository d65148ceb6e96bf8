"""A cursor over a raw header buffer that extracts fixed-width text fields."""

from __future__ import annotations

import math
from typing import Callable, TypeVar

from edf_window import errors

NumberT = TypeVar('NumberT', int, float)

_PADDING = ' \t\r\n\x00'


class FieldParser:
  """Reads consecutive fixed-width text and numeric fields from a buffer.

  Every read checks its bounds before slicing, so a truncated buffer raises
  OutOfData instead of silently returning a short field.
  """

  def __init__(self, buffer: bytes):
    self._buffer = bytes(buffer)
    self._offset = 0

  @property
  def offset(self) -> int:
    return self._offset

  @property
  def remaining(self) -> int:
    return len(self._buffer) - self._offset

  def _check_capacity(self, field_length: int) -> None:
    if field_length < 0:
      raise ValueError(f'Field length must be non-negative: {field_length}.')
    if self._offset + field_length > len(self._buffer):
      raise errors.OutOfData(
          f'Cannot read {field_length} bytes at offset {self._offset}: the '
          f'buffer only holds {len(self._buffer)} bytes.'
      )

  def skip(self, field_length: int) -> FieldParser:
    """Advances the cursor without reading. Returns self for chaining."""
    self._check_capacity(field_length)
    self._offset += field_length
    return self

  def parse_text(self, field_length: int) -> str:
    """Returns the next field as text, trimmed of its padding."""
    self._check_capacity(field_length)
    start = self._offset
    self._offset += field_length
    raw = self._buffer[start:self._offset]
    return raw.decode('utf-8', errors='replace').strip(_PADDING)

  def parse_number(
      self, field_length: int, kind: Callable[[str], NumberT] = int
  ) -> NumberT:
    """Returns the next field parsed as a number.

    Args:
      field_length: The width of the field in bytes.
      kind: Either int or float.

    Returns:
      The parsed value.

    Raises:
      OutOfData: If the buffer is too short.
      MalformedNumber: If the trimmed text is not a finite literal of kind.
    """
    start = self._offset
    text = self.parse_text(field_length)
    error = errors.MalformedNumber(
        f'Field at offset {start} is not a valid {kind.__name__}: {text!r}.'
    )
    # int() and float() also take digit separators, nan and inf.
    if '_' in text:
      raise error
    try:
      value = kind(text)
    except ValueError as e:
      raise error from e
    if not math.isfinite(value):
      raise error
    return value

  def parse_text_list(self, count: int, field_length: int) -> list[str]:
    return [self.parse_text(field_length) for _ in range(count)]

  def parse_number_list(
      self,
      count: int,
      field_length: int,
      kind: Callable[[str], NumberT] = int,
  ) -> list[NumberT]:
    return [self.parse_number(field_length, kind) for _ in range(count)]
