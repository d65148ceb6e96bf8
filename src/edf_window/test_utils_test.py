"""Tests for test_utils.py."""

from absl.testing import absltest  # type: ignore[import]
import numpy as np

from edf_window import header as header_lib
from edf_window import test_utils


class TestUtilsTest(absltest.TestCase):

  def test_generator_edf_bytes_size(self):
    content = test_utils.generator_edf_bytes(number_of_blocks=2)
    channels = test_utils.generator_channels()
    bytes_per_block = sum(c.samples_per_block for c in channels) * 2
    self.assertLen(
        content,
        header_lib.MAIN_HEADER_SIZE * (len(channels) + 1) + 2 * bytes_per_block,
    )

  def test_encode_channel_headers_size(self):
    channels = test_utils.generator_channels()
    self.assertLen(
        test_utils.encode_channel_headers(channels),
        header_lib.CHANNEL_HEADER_SIZE * len(channels),
    )

  def test_to_digital_clips_to_digital_range(self):
    spec = test_utils.ChannelSpec(label='x', samples_per_block=1)
    digital = test_utils.to_digital(spec, np.array([-5000., 0., 5000.]))
    self.assertEqual(digital[0], -32768)
    self.assertEqual(digital[-1], 32767)

  def test_field_too_long_raises(self):
    with self.assertRaises(ValueError):
      test_utils.encode_channel_headers(
          [test_utils.ChannelSpec(label='x' * 17, samples_per_block=1)]
      )
