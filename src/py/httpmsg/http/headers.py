import re
from typing import Iterator, NamedTuple, Sequence, TypeAlias

from ..utils.logging import debug
from .errors import InvalidHeaderName, InvalidHeaderValue

# -----------------------------------------------------------------------------
#
# VALIDATION
#
# -----------------------------------------------------------------------------

# SEE: RFC 7230 §3.2.6, field-name = token
RE_TOKEN: re.Pattern[str] = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
# NOTE: Obsolete line folding is rejected, so CR and LF never make it into
# a value. HTAB is the only control character allowed.
RE_VALUE_FORBIDDEN: re.Pattern[str] = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")

THeaderValue: TypeAlias = str | int
THeaderValues: TypeAlias = THeaderValue | Sequence[THeaderValue]


def validateName(name: str) -> str:
	"""Ensures that `name` is a valid header field name, returning it."""
	if not isinstance(name, str):
		raise InvalidHeaderName(
			f"Header name must be a string, got: {type(name).__name__}", name
		)
	if not RE_TOKEN.fullmatch(name):
		debug("Header name rejected", Name=name)
		raise InvalidHeaderName(f"Invalid header name: {name!r}", name)
	return name


def validateValue(value: THeaderValue, name: str | None = None) -> str:
	"""Ensures that `value` is a valid (non-empty) header field value,
	returning it as a string."""
	# NOTE: `bool` is an `int`, but `True` is not a sensible header value
	if isinstance(value, int) and not isinstance(value, bool):
		return str(value)
	elif not isinstance(value, str):
		raise InvalidHeaderValue(
			f"Header value must be a string, got: {type(value).__name__}",
			value,
			name,
		)
	elif not value:
		raise InvalidHeaderValue("Header value is empty", value, name)
	elif RE_VALUE_FORBIDDEN.search(value):
		debug("Header value rejected", Name=name, Value=value)
		raise InvalidHeaderValue(
			f"Header value contains control characters: {value!r}", value, name
		)
	return value


def normalizeValues(value: THeaderValues, name: str | None = None) -> tuple[str, ...]:
	"""Normalizes a single value or a sequence of values into a non-empty
	tuple of validated strings."""
	if isinstance(value, (list, tuple)):
		if not value:
			raise InvalidHeaderValue(
				"Header requires at least one value", value, name
			)
		return tuple(validateValue(_, name) for _ in value)
	else:
		return (validateValue(value, name),)


# -----------------------------------------------------------------------------
#
# HEADER BAG
#
# -----------------------------------------------------------------------------


class HTTPHeaderEntry(NamedTuple):
	"""A header as displayed (`name`) along with its values, in insertion
	order."""

	name: str
	values: tuple[str, ...]


class HTTPHeaderBag:
	"""A case-insensitive, casing-preserving ordered multi-map of headers.

	The bag is keyed by the lowercase header name, and the dictionary order
	is the order in which headers were first inserted. Entries are immutable
	tuples, so that a `copy()` of the bag shares no mutable state with the
	original.
	"""

	__slots__ = ["_entries"]

	def __init__(self, headers: "HTTPHeaderBag | dict[str, THeaderValues] | None" = None):
		self._entries: dict[str, HTTPHeaderEntry] = {}
		if isinstance(headers, HTTPHeaderBag):
			self._entries.update(headers._entries)
		elif headers:
			for k, v in headers.items():
				self.add(k, v)

	def copy(self) -> "HTTPHeaderBag":
		res = HTTPHeaderBag()
		res._entries = dict(self._entries)
		return res

	def set(self, name: str, values: THeaderValues) -> "HTTPHeaderBag":
		"""Replaces the values and the displayed name of the header, keeping
		its position, or inserts it at the end."""
		normalized = normalizeValues(values, validateName(name))
		self._entries[name.lower()] = HTTPHeaderEntry(name, normalized)
		return self

	def add(self, name: str, values: THeaderValues) -> "HTTPHeaderBag":
		"""Appends values to the existing header (keeping its name and
		position), or inserts it at the end."""
		normalized = normalizeValues(values, validateName(name))
		key: str = name.lower()
		existing = self._entries.get(key)
		if existing is None:
			self._entries[key] = HTTPHeaderEntry(name, normalized)
		else:
			self._entries[key] = HTTPHeaderEntry(
				existing.name, existing.values + normalized
			)
		return self

	# NOTE: Lookups never fail, a name that is not a string matches nothing

	def remove(self, name: str) -> "HTTPHeaderBag":
		if isinstance(name, str):
			self._entries.pop(name.lower(), None)
		return self

	def get(self, name: str) -> list[str]:
		entry = self._entries.get(name.lower()) if isinstance(name, str) else None
		return list(entry.values) if entry else []

	def has(self, name: str) -> bool:
		return isinstance(name, str) and name.lower() in self._entries

	def toOrderedMapping(self) -> dict[str, list[str]]:
		return {_.name: list(_.values) for _ in self._entries.values()}

	def __contains__(self, name: object) -> bool:
		return self.has(name)  # type: ignore[arg-type]

	def __iter__(self) -> Iterator[str]:
		for _ in self._entries.values():
			yield _.name

	def __len__(self) -> int:
		return len(self._entries)

	def __eq__(self, other: object) -> bool:
		return (
			isinstance(other, HTTPHeaderBag)
			and self.toOrderedMapping() == other.toOrderedMapping()
		)

	def __str__(self) -> str:
		return f"Headers({self.toOrderedMapping()})"


# EOF
