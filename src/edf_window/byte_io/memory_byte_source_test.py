"""Tests for memory_byte_source.py."""

import asyncio

from absl.testing import parameterized  # type: ignore[import]

from edf_window import errors
from edf_window.byte_io import memory_byte_source

_CONTENT = b'0123456789'


class InMemorySourceTest(parameterized.TestCase):

  def test_read(self):
    source = memory_byte_source.InMemorySource(_CONTENT)
    self.assertLen(source, 10)
    self.assertEqual(source.read_exact(2, 3), b'234')
    self.assertEqual(source.read_exact(10, 0), b'')

  @parameterized.named_parameters(
      ('past_the_end', 8, 3),
      ('negative_offset', -1, 2),
  )
  def test_out_of_range_raises_io_failure(self, offset, length):
    source = memory_byte_source.InMemorySource(_CONTENT)
    with self.assertRaises(errors.IOFailure):
      source.read(offset, length)

  def test_async_read(self):
    source = memory_byte_source.AsyncInMemorySource(_CONTENT)
    self.assertEqual(asyncio.run(source.read_exact(7, 3)), b'789')

  def test_async_out_of_range_raises_io_failure(self):
    source = memory_byte_source.AsyncInMemorySource(_CONTENT)
    with self.assertRaises(errors.IOFailure):
      asyncio.run(source.read_exact(8, 3))
