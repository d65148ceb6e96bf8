"""Errors raised while decoding EDF headers and reading data windows."""


class EdfError(Exception):
  """Base class of every error raised by edf_window."""


class OutOfData(EdfError):
  """A header region is shorter than its fixed field layout requires."""


class MalformedNumber(EdfError, ValueError):
  """A numeric header field does not hold a valid literal."""


class IOFailure(EdfError, IOError):
  """A byte source could not supply exactly the requested range."""


class WindowOutOfBounds(EdfError, ValueError):
  """A requested time window exceeds the recorded duration."""


class DegenerateChannel(EdfError, ValueError):
  """A channel has digital_maximum == digital_minimum."""


class ChannelNotFound(EdfError, KeyError):
  """A requested channel label is not present in the header."""
