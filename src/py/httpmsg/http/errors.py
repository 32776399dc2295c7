from typing import Any

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------
# Argument errors are `ValueError`s, so that callers that don't care about
# the details can catch them like any other rejected argument.


class HTTPMessageError(ValueError):
	"""Base class for rejected message derivations. The receiver of the
	failed `withX` call is always left untouched."""

	def __init__(self, message: str, value: Any = None):
		super().__init__(message)
		self.message: str = message
		self.value: Any = value


class InvalidHeader(HTTPMessageError):
	"""A header name or value is not well-formed."""

	def __init__(self, message: str, value: Any = None, name: str | None = None):
		super().__init__(message, value)
		self.name: str | None = name


class InvalidHeaderName(InvalidHeader):
	pass


class InvalidHeaderValue(InvalidHeader):
	pass


class InvalidBody(HTTPMessageError):
	"""The given body does not implement the `HTTPStream` capability."""


class InvalidProtocolVersion(HTTPMessageError):
	pass


class InvalidMethod(HTTPMessageError):
	pass


class InvalidRequestTarget(HTTPMessageError):
	pass


class InvalidStatus(HTTPMessageError):
	pass


class HTTPStreamError(IOError):
	"""Raised when a stream is used in a way its capabilities don't allow,
	such as writing to a read-only stream or reading a detached one."""

	def __init__(self, message: str, operation: str | None = None):
		super().__init__(message)
		self.message: str = message
		self.operation: str | None = operation


# EOF
