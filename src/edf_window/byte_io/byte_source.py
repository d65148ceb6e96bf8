"""A module that exposes all byte range sources publicly."""

from edf_window.byte_io import base_byte_source
from edf_window.byte_io import local_byte_source
from edf_window.byte_io import memory_byte_source

ByteRangeSource = base_byte_source.ByteRangeSource
AsyncByteRangeSource = base_byte_source.AsyncByteRangeSource
LocalFileSource = local_byte_source.LocalFileSource
AsyncLocalFileSource = local_byte_source.AsyncLocalFileSource
InMemorySource = memory_byte_source.InMemorySource
AsyncInMemorySource = memory_byte_source.AsyncInMemorySource
