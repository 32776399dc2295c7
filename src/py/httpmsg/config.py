from os import getenv
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

# Name of the minimum `LogLevel` that gets written out
LOG_LEVEL: str = getenv("HTTPMSG_LOG_LEVEL", "Info")

# Protocol version given to messages created without an explicit one
DEFAULT_PROTOCOL_VERSION: str = getenv("HTTPMSG_PROTOCOL_VERSION", "1.1")

# Size of the chunks pulled from files and iterators when loading a stream
STREAM_CHUNK: int = int(getenv("HTTPMSG_STREAM_CHUNK", 64_000))

# EOF
