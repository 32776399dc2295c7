DEFAULT_ENCODING: str = "utf8"


def asBytes(value: str | bytes | bytearray | memoryview | None) -> bytes:
	"""Coerces text and byte-likes to `bytes`, encoding text with the
	default encoding."""
	if isinstance(value, bytes):
		return value
	elif isinstance(value, (bytearray, memoryview)):
		return bytes(value)
	elif isinstance(value, str):
		return value.encode(DEFAULT_ENCODING)
	elif value is None:
		return b""
	else:
		raise ValueError(f"Expected bytes or str, got: {value!r}")


# EOF
