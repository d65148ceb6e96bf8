"""Defines pytest fixtures."""

import logging
import tempfile

import pytest

from edf_window import test_utils


@pytest.fixture(scope='session', autouse=True)
def enable_debug_logging():
  """Makes every logging call format its message during tests."""
  logger = logging.getLogger()
  original_level = logger.level
  logger.setLevel(logging.DEBUG)
  yield
  logger.setLevel(original_level)


@pytest.fixture(scope='class')
def generator_edf_file(request):
  """Writes a 12 channel generator recording, exposed as cls.edf_path."""
  with tempfile.TemporaryDirectory() as temp_dir:
    request.cls.edf_path = test_utils.write_edf(
        temp_dir, test_utils.generator_edf_bytes(), 'test_generator.edf'
    )
    yield
