import copy
import re
from typing import Any, TypeVar

from mypy_extensions import mypyc_attr

from ..config import DEFAULT_PROTOCOL_VERSION
from ..utils.logging import debug
from .body import HTTPBody, HTTPStream
from .errors import (
	InvalidMethod,
	InvalidProtocolVersion,
	InvalidRequestTarget,
	InvalidStatus,
)
from .headers import RE_TOKEN, RE_VALUE_FORBIDDEN, HTTPHeaderBag, THeaderValues
from .status import HTTP_STATUS

T = TypeVar("T", bound="HTTPMessage")

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------

# Visible ASCII only, so no whitespace nor control characters
RE_VISIBLE: re.Pattern[str] = re.compile(r"[!-~]+")


def validateProtocolVersion(version: str) -> str:
	"""Ensures the version is a non-empty token like `1.1` or `2`."""
	if not isinstance(version, str) or not RE_VISIBLE.fullmatch(version):
		debug("Protocol version rejected", Version=repr(version))
		raise InvalidProtocolVersion(f"Invalid protocol version: {version!r}", version)
	return version


def validateMethod(method: str) -> str:
	if not isinstance(method, str) or not RE_TOKEN.fullmatch(method):
		raise InvalidMethod(f"Invalid request method: {method!r}", method)
	return method


def validateRequestTarget(target: str) -> str:
	if not isinstance(target, str) or not RE_VISIBLE.fullmatch(target):
		raise InvalidRequestTarget(f"Invalid request target: {target!r}", target)
	return target


def validateStatus(status: int) -> int:
	if (
		not isinstance(status, int)
		or isinstance(status, bool)
		or not (100 <= status <= 599)
	):
		raise InvalidStatus(f"Invalid status code: {status!r}", status)
	return status


def validateReasonPhrase(reason: str, status: int) -> str:
	"""Returns the reason phrase, or the standard one for the status when
	empty."""
	if not isinstance(reason, str) or RE_VALUE_FORBIDDEN.search(reason):
		raise InvalidStatus(f"Invalid reason phrase: {reason!r}", reason)
	return reason or HTTP_STATUS.get(status, "")


# -----------------------------------------------------------------------------
#
# MESSAGE
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class HTTPMessage:
	"""An immutable HTTP message: protocol version, headers and body.

	Messages are never modified once created. Every `withX` method returns a
	new message of the same class, with its own copy of the headers, and
	leaves the receiver as it was, including when the call fails.

	The body is held by reference: deriving a message shares its body stream
	with the original, reading one advances the other.
	"""

	__slots__ = ["_protocolVersion", "_headers", "_body"]

	def __init__(
		self,
		headers: HTTPHeaderBag | dict[str, THeaderValues] | None = None,
		body: Any = None,
		protocolVersion: str | None = None,
	):
		self._protocolVersion: str = validateProtocolVersion(
			DEFAULT_PROTOCOL_VERSION if protocolVersion is None else protocolVersion
		)
		self._headers: HTTPHeaderBag = HTTPHeaderBag(headers)
		self._body: HTTPStream = HTTPBody.FromContent(body)

	def _derive(self: T, **changes: Any) -> T:
		"""Returns a copy of this message with the given slots updated. The
		headers are copied unless given, so that no two messages share them."""
		res = copy.copy(self)
		if "_headers" not in changes:
			res._headers = self._headers.copy()
		for k, v in changes.items():
			setattr(res, k, v)
		return res

	# =========================================================================
	# PROTOCOL
	# =========================================================================

	def getProtocolVersion(self) -> str:
		return self._protocolVersion

	def withProtocolVersion(self: T, version: str) -> T:
		return self._derive(_protocolVersion=validateProtocolVersion(version))

	# =========================================================================
	# HEADERS
	# =========================================================================

	def getHeaders(self) -> dict[str, list[str]]:
		"""Returns a snapshot of the headers, as originally cased and in
		the order they were first added."""
		return self._headers.toOrderedMapping()

	def hasHeader(self, name: str) -> bool:
		return self._headers.has(name)

	def getHeader(self, name: str) -> list[str]:
		return self._headers.get(name)

	def getHeaderLine(self, name: str) -> str:
		"""Returns the values of the header joined by a comma, which
		won't round-trip for values like `Set-Cookie` that may contain
		commas themselves."""
		return ", ".join(self._headers.get(name))

	def withHeader(self: T, name: str, value: THeaderValues) -> T:
		"""Replaces any header matching `name` with the given value(s),
		the header is then displayed with the casing of `name`."""
		return self._derive(_headers=self._headers.copy().set(name, value))

	def withAddedHeader(self: T, name: str, value: THeaderValues) -> T:
		"""Appends the value(s) to the header matching `name`, keeping
		the existing casing, or adds it."""
		return self._derive(_headers=self._headers.copy().add(name, value))

	def withoutHeader(self: T, name: str) -> T:
		return self._derive(_headers=self._headers.copy().remove(name))

	# =========================================================================
	# BODY
	# =========================================================================

	def getBody(self) -> HTTPStream:
		return self._body

	def withBody(self: T, body: HTTPStream) -> T:
		return self._derive(_body=HTTPBody.Validate(body))

	def __str__(self) -> str:
		return f"Message({self._protocolVersion} {self._headers} {self._body})"

	def __repr__(self) -> str:
		return f"<{self.__class__.__name__} {self}>"


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(HTTPMessage):
	"""An HTTP request message, adding the method and request target."""

	__slots__ = ["_method", "_requestTarget"]

	def __init__(
		self,
		method: str = "GET",
		target: str = "/",
		headers: HTTPHeaderBag | dict[str, THeaderValues] | None = None,
		body: Any = None,
		protocolVersion: str | None = None,
	):
		self._method: str = validateMethod(method)
		self._requestTarget: str = validateRequestTarget(target)
		super().__init__(headers=headers, body=body, protocolVersion=protocolVersion)

	def getMethod(self) -> str:
		return self._method

	def withMethod(self, method: str) -> "HTTPRequest":
		# NOTE: Methods are case-sensitive, so `get` is not `GET`
		return self._derive(_method=validateMethod(method))

	def getRequestTarget(self) -> str:
		return self._requestTarget

	def withRequestTarget(self, target: str) -> "HTTPRequest":
		return self._derive(_requestTarget=validateRequestTarget(target))

	def __str__(self) -> str:
		return f"Request({self._method} {self._requestTarget} HTTP/{self._protocolVersion} {self._headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse(HTTPMessage):
	"""An HTTP response message, adding the status code and reason phrase."""

	__slots__ = ["_statusCode", "_reasonPhrase"]

	def __init__(
		self,
		status: int = 200,
		reason: str = "",
		headers: HTTPHeaderBag | dict[str, THeaderValues] | None = None,
		body: Any = None,
		protocolVersion: str | None = None,
	):
		self._statusCode: int = validateStatus(status)
		self._reasonPhrase: str = validateReasonPhrase(reason, status)
		super().__init__(headers=headers, body=body, protocolVersion=protocolVersion)

	def getStatusCode(self) -> int:
		return self._statusCode

	def getReasonPhrase(self) -> str:
		return self._reasonPhrase

	def withStatus(self, code: int, reasonPhrase: str = "") -> "HTTPResponse":
		"""Returns a response with the given status, the reason phrase
		defaulting to the standard one for the code."""
		return self._derive(
			_statusCode=validateStatus(code),
			_reasonPhrase=validateReasonPhrase(reasonPhrase, code),
		)

	def __str__(self) -> str:
		return f"Response(HTTP/{self._protocolVersion} {self._statusCode} {self._reasonPhrase} {self._headers})"


# EOF
