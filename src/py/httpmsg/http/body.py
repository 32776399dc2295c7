import inspect
import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any, Iterable, Iterator

from mypy_extensions import mypyc_attr

from ..config import STREAM_CHUNK
from ..utils.io import asBytes
from ..utils.logging import debug, exception, warning
from .errors import HTTPStreamError, InvalidBody

# -----------------------------------------------------------------------------
#
# STREAM CAPABILITY
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class HTTPStream(ABC):
	"""The capability a message body must implement. Messages only hold a
	reference to the stream: they never read, seek or close it."""

	__slots__ = ()

	@abstractmethod
	def read(self, size: int = -1) -> bytes:
		"""Reads up to `size` bytes (everything left when negative). Returns
		`b""` at the end of the stream."""

	def getContents(self) -> bytes:
		"""Reads the remainder of the stream."""
		return self.read(-1)

	@abstractmethod
	def write(self, data: bytes | str) -> int: ...

	@abstractmethod
	def seek(self, offset: int, whence: int = os.SEEK_SET) -> int: ...

	def rewind(self) -> int:
		return self.seek(0)

	@abstractmethod
	def tell(self) -> int: ...

	@abstractmethod
	def eof(self) -> bool: ...

	@abstractmethod
	def getSize(self) -> int | None:
		"""Returns the size in bytes, or `None` when unknown."""

	@abstractmethod
	def isReadable(self) -> bool: ...

	@abstractmethod
	def isWritable(self) -> bool: ...

	@abstractmethod
	def isSeekable(self) -> bool: ...

	@abstractmethod
	def close(self) -> None: ...

	@abstractmethod
	def detach(self) -> Any:
		"""Separates the underlying resource from the stream, which becomes
		unusable. Returns the resource, or `None` if already detached."""

	def getMetadata(self, key: str | None = None) -> Any:
		meta: dict[str, Any] = {
			"readable": self.isReadable(),
			"writable": self.isWritable(),
			"seekable": self.isSeekable(),
			"size": self.getSize(),
		}
		return meta if key is None else meta.get(key)

	def __bytes__(self) -> bytes:
		"""Returns the whole contents (from the start when seekable), or
		`b""` when the stream can't be read."""
		try:
			if self.isSeekable():
				self.rewind()
			return self.getContents()
		except HTTPStreamError:
			return b""

	def __enter__(self) -> "HTTPStream":
		return self

	def __exit__(self, *args: Any) -> None:
		self.close()


# -----------------------------------------------------------------------------
#
# FILE-LIKE STREAMS
#
# -----------------------------------------------------------------------------


class HTTPIOStream(HTTPStream):
	"""A stream backed by a binary file-like object."""

	__slots__ = ["_io", "_readable", "_writable", "_seekable"]

	def __init__(self, stream: IO[bytes]):
		self._io: IO[bytes] | None = stream
		self._readable: bool = stream.readable()
		self._writable: bool = stream.writable()
		self._seekable: bool = stream.seekable()

	def _attached(self, operation: str) -> IO[bytes]:
		if self._io is None:
			raise HTTPStreamError(f"Cannot {operation}: stream is detached", operation)
		if self._io.closed:
			raise HTTPStreamError(f"Cannot {operation}: stream is closed", operation)
		return self._io

	def read(self, size: int = -1) -> bytes:
		stream = self._attached("read")
		if not self._readable:
			raise HTTPStreamError("Stream is not readable", "read")
		return stream.read(size if size >= 0 else -1) or b""

	def write(self, data: bytes | str) -> int:
		stream = self._attached("write")
		if not self._writable:
			raise HTTPStreamError("Stream is not writable", "write")
		return stream.write(asBytes(data))

	def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
		stream = self._attached("seek")
		if not self._seekable:
			raise HTTPStreamError("Stream is not seekable", "seek")
		try:
			return stream.seek(offset, whence)
		except (OSError, ValueError) as e:
			raise HTTPStreamError(
				f"Unable to seek to {offset} (whence={whence}): {e}", "seek"
			) from e

	def tell(self) -> int:
		return self._attached("tell").tell()

	def eof(self) -> bool:
		if self._io is None or self._io.closed:
			return True
		size = self.getSize()
		return size is not None and self._io.tell() >= size

	def getSize(self) -> int | None:
		if self._io is None or self._io.closed:
			return None
		if isinstance(self._io, io.BytesIO):
			return self._io.getbuffer().nbytes
		try:
			return os.fstat(self._io.fileno()).st_size
		except (OSError, AttributeError, io.UnsupportedOperation):
			return None

	def isReadable(self) -> bool:
		return self._readable and self._io is not None and not self._io.closed

	def isWritable(self) -> bool:
		return self._writable and self._io is not None and not self._io.closed

	def isSeekable(self) -> bool:
		return self._seekable and self._io is not None and not self._io.closed

	def close(self) -> None:
		stream = self.detach()
		if stream is not None:
			try:
				stream.close()
			except OSError as e:
				# The stream is gone either way, there's nothing left to do
				exception(e, "Failed to close stream")

	def detach(self) -> IO[bytes] | None:
		stream, self._io = self._io, None
		return stream

	def getMetadata(self, key: str | None = None) -> Any:
		meta: dict[str, Any] = super().getMetadata()
		meta["closed"] = self._io is None or self._io.closed
		meta["mode"] = getattr(self._io, "mode", None)
		meta["name"] = getattr(self._io, "name", None)
		return meta if key is None else meta.get(key)


class HTTPBytesStream(HTTPIOStream):
	"""An in-memory stream, readable, writable and seekable. Writing
	happens at the current position."""

	__slots__: list[str] = []

	def __init__(self, data: bytes | str = b""):
		super().__init__(io.BytesIO(asBytes(data)))

	def __str__(self) -> str:
		return f"HTTPBytesStream(size={self.getSize()})"


class HTTPFileStream(HTTPIOStream):
	"""A stream backed by a file on disk. The capabilities of the stream
	follow from the `mode` the file is opened with."""

	__slots__ = ["path"]

	def __init__(self, path: Path | str, mode: str = "rb"):
		if "b" not in mode:
			mode = f"{mode}b"
		self.path: Path = Path(path)
		try:
			stream = open(self.path, mode)
		except OSError as e:
			raise HTTPStreamError(f"Unable to open {self.path}: {e}", "open") from e
		super().__init__(stream)

	def __str__(self) -> str:
		return f"HTTPFileStream({self.path})"


# -----------------------------------------------------------------------------
#
# ITERATOR STREAMS
#
# -----------------------------------------------------------------------------


class HTTPIteratorStream(HTTPStream):
	"""A read-only stream pulling its data from an iterator of chunks, like
	a generator producing a response body. Its size is unknown and it
	can't be rewound."""

	__slots__ = ["_iterator", "_buffer", "_position", "_exhausted"]

	def __init__(self, iterable: Iterable[bytes | str]):
		self._iterator: Iterator[bytes | str] | None = iter(iterable)
		self._buffer: bytearray = bytearray()
		self._position: int = 0
		self._exhausted: bool = False

	def _pull(self) -> bool:
		"""Pulls the next chunk in the buffer, returning `False` once the
		iterator is exhausted."""
		if self._exhausted or self._iterator is None:
			return False
		try:
			chunk = next(self._iterator)
		except StopIteration:
			self._exhausted = True
			return False
		try:
			self._buffer += asBytes(chunk)
		except ValueError as e:
			raise HTTPStreamError(
				f"Unsupported chunk {type(chunk).__name__}: {chunk!r}", "read"
			) from e
		return True

	def read(self, size: int = -1) -> bytes:
		if self._iterator is None:
			raise HTTPStreamError("Cannot read: stream is detached", "read")
		if size < 0:
			while self._pull():
				pass
		else:
			while len(self._buffer) < size and self._pull():
				pass
		n: int = len(self._buffer) if size < 0 else min(size, len(self._buffer))
		res = bytes(self._buffer[:n])
		del self._buffer[:n]
		self._position += n
		return res

	def write(self, data: bytes | str) -> int:
		raise HTTPStreamError("Stream is not writable", "write")

	def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
		raise HTTPStreamError("Stream is not seekable", "seek")

	def tell(self) -> int:
		if self._iterator is None:
			raise HTTPStreamError("Cannot tell: stream is detached", "tell")
		return self._position

	def eof(self) -> bool:
		if self._iterator is None:
			return True
		# We need to pull to know if there's anything left
		while not self._buffer and self._pull():
			pass
		return not self._buffer and self._exhausted

	def getSize(self) -> int | None:
		return None

	def isReadable(self) -> bool:
		return self._iterator is not None

	def isWritable(self) -> bool:
		return False

	def isSeekable(self) -> bool:
		return False

	def close(self) -> None:
		iterator = self.detach()
		if iterator is None:
			return
		if not self._exhausted:
			warning("Iterator stream closed before being exhausted", Read=self._position)
		if inspect.isgenerator(iterator):
			iterator.close()
		self._buffer.clear()

	def detach(self) -> Iterator[bytes | str] | None:
		iterator, self._iterator = self._iterator, None
		return iterator

	def __str__(self) -> str:
		return f"HTTPIteratorStream(read={self._position})"


# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


class HTTPBody:
	"""Contains helpers to work with bodies."""

	@staticmethod
	def FromContent(content: Any = None) -> HTTPStream:
		"""Wraps the given content in the matching stream."""
		if isinstance(content, HTTPStream):
			return content
		elif content is None:
			return HTTPBytesStream()
		elif isinstance(content, (str, bytes, bytearray, memoryview)):
			return HTTPBytesStream(asBytes(content))
		elif isinstance(content, Path):
			return HTTPFileStream(content)
		elif inspect.isgenerator(content) or isinstance(content, Iterator):
			return HTTPIteratorStream(content)
		else:
			debug("Body rejected", Type=type(content).__name__)
			raise InvalidBody(
				f"Unsupported content {type(content).__name__}: {content!r}", content
			)

	@staticmethod
	def Validate(body: Any) -> HTTPStream:
		"""Ensures that `body` implements the stream capability."""
		if not isinstance(body, HTTPStream):
			debug("Body rejected", Type=type(body).__name__)
			raise InvalidBody(
				f"Body must be an HTTPStream, got: {type(body).__name__}", body
			)
		return body

	@staticmethod
	def Load(body: HTTPStream, chunk: int = STREAM_CHUNK) -> bytes:
		"""Reads the remainder of the body chunk by chunk."""
		res = bytearray()
		while chunk_data := body.read(chunk):
			res += chunk_data
		return bytes(res)


# EOF
