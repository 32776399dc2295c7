from .http.model import (
	HTTPMessage,
	HTTPRequest,
	HTTPResponse,
)  # NOQA: F401
from .http.headers import HTTPHeaderBag  # NOQA: F401
from .http.body import (
	HTTPBody,
	HTTPStream,
	HTTPBytesStream,
	HTTPFileStream,
	HTTPIteratorStream,
)  # NOQA: F401
from .http.errors import (
	HTTPMessageError,
	HTTPStreamError,
	InvalidHeader,
	InvalidHeaderName,
	InvalidHeaderValue,
	InvalidBody,
	InvalidProtocolVersion,
	InvalidMethod,
	InvalidRequestTarget,
	InvalidStatus,
)  # NOQA: F401

__version__ = "1.0.0"

# EOF
