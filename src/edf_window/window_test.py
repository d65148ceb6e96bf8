"""Tests for window.py."""

from absl.testing import parameterized  # type: ignore[import]
import numpy as np

from edf_window import errors
from edf_window import header as header_lib
from edf_window import test_utils
from edf_window import window

_CHANNELS = [
    test_utils.ChannelSpec(label='fast', samples_per_block=4),
    test_utils.ChannelSpec(
        label='slow',
        samples_per_block=1,
        physical_minimum=0,
        physical_maximum=10,
        digital_minimum=0,
        digital_maximum=100,
    ),
]
_NUM_BLOCKS = 5
_BLOCK_DURATION_MS = 1000


def _header(channels=None) -> header_lib.Header:
  channels = _CHANNELS if channels is None else channels
  main_header = header_lib.decode_main_header(
      test_utils.encode_main_header(
          number_of_signals=len(channels),
          number_of_blocks=_NUM_BLOCKS,
          block_duration_s=_BLOCK_DURATION_MS / 1000,
      )
  )
  return header_lib.decode_channel_headers(
      main_header, test_utils.encode_channel_headers(channels)
  )


class PlanWindowTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.header = _header()

  @parameterized.named_parameters(
      ('aligned', 0, 1000, 0, 1),
      ('whole_recording', 0, 5000, 0, 5),
      ('unaligned_start', 1500, 1000, 1, 1),
      ('unaligned_duration', 1000, 1500, 1, 2),
      ('short_duration', 2999, 1, 2, 1),
      ('empty', 3000, 0, 3, 0),
  )
  def test_block_selection(
      self, start, duration, expected_first_block, expected_blocks
  ):
    plan = window.plan_window(self.header, start, duration)
    self.assertEqual(plan.first_block_index, expected_first_block)
    self.assertEqual(plan.blocks_to_fetch, expected_blocks)

  def test_byte_range(self):
    plan = window.plan_window(self.header, 2000, 2000)
    bytes_per_block = (4 + 1) * 2
    self.assertEqual(
        plan.offset, self.header.header_byte_size + 2 * bytes_per_block
    )
    self.assertEqual(plan.length, 2 * bytes_per_block)

  @parameterized.named_parameters(
      ('past_the_end', 4001, 1000),
      ('too_long', 0, 5001),
      ('start_after_end', 6000, 0),
      ('negative_start', -1, 10),
      ('negative_duration', 0, -10),
  )
  def test_out_of_bounds(self, start, duration):
    with self.assertRaises(errors.WindowOutOfBounds):
      window.plan_window(self.header, start, duration)

  def test_window_ending_at_recording_end_is_valid(self):
    plan = window.plan_window(self.header, 4000, 1000)
    self.assertEqual(plan.first_block_index, 4)
    self.assertEqual(plan.blocks_to_fetch, 1)


class DecodeInt16Test(parameterized.TestCase):

  def test_little_endian_signed(self):
    samples = window.decode_int16_le(bytes([200, 1, 44, 238]), 2)
    np.testing.assert_array_equal(samples, [456, -4564])

  @parameterized.named_parameters(
      ('short', bytes([200, 1, 44]), 2),
      ('long', bytes([200, 1, 44, 238]), 1),
  )
  def test_wrong_length_raises(self, data, count):
    with self.assertRaises(errors.IOFailure):
      window.decode_int16_le(data, count)


class DecodeWindowTest(parameterized.TestCase):

  def setUp(self):
    super().setUp()
    self.header = _header()
    self.signals = [
        np.arange(4 * _NUM_BLOCKS, dtype=np.int16) - 10,
        np.arange(_NUM_BLOCKS, dtype=np.int16) * 10,
    ]
    self.data = test_utils.encode_data_blocks(
        _CHANNELS, self.signals, _NUM_BLOCKS
    )

  def _read(self, start, duration):
    plan = window.plan_window(self.header, start, duration)
    offset = plan.offset - self.header.header_byte_size
    return window.decode_window(
        self.header, plan, self.data[offset:offset + plan.length]
    )

  def test_demultiplexes_channels(self):
    fast, slow = self._read(1000, 2000)

    fast_channel, slow_channel = self.header.channels
    np.testing.assert_allclose(
        fast, fast_channel.to_physical(self.signals[0][4:12]), rtol=1e-6
    )
    np.testing.assert_allclose(slow, [1., 2.], rtol=1e-6)
    self.assertAlmostEqual(slow_channel.to_physical(20), 2.)

  def test_lengths_follow_samples_per_block(self):
    result = self._read(0, 3000)
    self.assertLen(result, 2)
    self.assertLen(result[0], 12)
    self.assertLen(result[1], 3)
    self.assertEqual(result[0].dtype, np.float32)

  def test_unaligned_window_is_not_trimmed(self):
    _, slow = self._read(1500, 100)
    np.testing.assert_allclose(slow, [1.])

  def test_empty_window(self):
    result = self._read(2000, 0)
    self.assertLen(result, 2)
    for channel_samples in result:
      self.assertEmpty(channel_samples)

  def test_short_data_raises(self):
    plan = window.plan_window(self.header, 0, 1000)
    with self.assertRaises(errors.IOFailure):
      window.decode_window(self.header, plan, b'\x00' * (plan.length - 2))

  def test_results_are_fresh_arrays(self):
    first = self._read(0, 1000)
    second = self._read(0, 1000)
    first[1][0] = 123
    self.assertNotEqual(second[1][0], 123)
