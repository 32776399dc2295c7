import pytest

from httpmsg import (
	HTTPBytesStream,
	HTTPHeaderBag,
	HTTPMessage,
	HTTPRequest,
	HTTPResponse,
	InvalidBody,
	InvalidHeader,
	InvalidHeaderName,
	InvalidHeaderValue,
	InvalidMethod,
	InvalidProtocolVersion,
	InvalidRequestTarget,
	InvalidStatus,
)

CASINGS = ["X-Trace-Id", "x-trace-id", "X-TRACE-ID", "x-TrAcE-iD"]


def test_defaults():
	m = HTTPMessage()
	assert m.getProtocolVersion() == "1.1"
	assert m.getHeaders() == {}
	assert isinstance(m.getBody(), HTTPBytesStream)
	assert m.getBody().getContents() == b""


@pytest.mark.parametrize("name", CASINGS)
@pytest.mark.parametrize("lookup", CASINGS)
def test_with_header_any_casing(name, lookup):
	m = HTTPMessage().withHeader(name, "v")
	assert m.getHeader(lookup) == ["v"]
	assert m.hasHeader(lookup)
	assert m.getHeaders() == {name: ["v"]}


def test_with_header_replaces_values_and_casing():
	m = HTTPMessage({"accept": ["a", "b"], "Host": "h"})
	m2 = m.withHeader("ACCEPT", ["c"])
	assert m2.getHeaders() == {"ACCEPT": ["c"], "Host": ["h"]}
	assert list(m2.getHeaders()) == ["ACCEPT", "Host"]


def test_added_header_order():
	m = HTTPMessage().withAddedHeader("X", "a").withAddedHeader("X", "b")
	assert m.getHeader("x") == ["a", "b"]
	m = m.withAddedHeader("x", ["c", "d"])
	assert m.getHeader("X") == ["a", "b", "c", "d"]


def test_casing_preservation():
	m = HTTPMessage().withHeader("Content-Type", "x")
	assert m.getHeaders() == {"Content-Type": ["x"]}
	m = m.withAddedHeader("content-type", "y")
	assert m.getHeaders() == {"Content-Type": ["x", "y"]}


def test_insertion_order():
	m = (
		HTTPMessage()
		.withHeader("B", "1")
		.withHeader("A", "2")
		.withAddedHeader("C", "3")
		.withAddedHeader("b", "4")
	)
	assert list(m.getHeaders()) == ["B", "A", "C"]
	m = m.withoutHeader("A").withHeader("a", "5")
	assert list(m.getHeaders()) == ["B", "C", "a"]


def test_without_header_idempotent():
	m = HTTPMessage({"Accept": "a", "Host": "h"})
	once = m.withoutHeader("ACCEPT")
	twice = once.withoutHeader("accept")
	assert once.getHeaders() == twice.getHeaders() == {"Host": ["h"]}
	assert twice is not once
	absent = m.withoutHeader("Missing")
	assert absent is not m
	assert absent.getHeaders() == m.getHeaders()


def test_header_line():
	m = HTTPMessage().withHeader("Accept", ["a", "b", "c"])
	assert m.getHeaderLine("accept") == ", ".join(m.getHeader("accept"))
	assert m.getHeaderLine("accept") == "a, b, c"
	assert not m.hasHeader("Missing")
	assert m.getHeaderLine("Missing") == ""
	assert m.getHeader("Missing") == []


def test_non_mutation():
	m = HTTPMessage({"Accept": "a"}, protocolVersion="1.0")
	before = m.getHeaders()
	body = m.getBody()
	derived = [
		m.withProtocolVersion("2"),
		m.withHeader("Accept", "b"),
		m.withAddedHeader("accept", "c"),
		m.withoutHeader("Accept"),
		m.withHeader("Host", "h"),
		m.withBody(HTTPBytesStream(b"data")),
	]
	for m2 in derived:
		assert m2 is not m
		assert type(m2) is HTTPMessage
	assert m.getHeaders() == before
	assert m.getProtocolVersion() == "1.0"
	assert m.getBody() is body


def test_derived_messages_are_independent():
	m = HTTPMessage({"Accept": "a"})
	left = m.withAddedHeader("Accept", "l")
	right = m.withAddedHeader("Accept", "r")
	assert left.withAddedHeader("Accept", "ll").getHeader("Accept") == ["a", "l", "ll"]
	assert left.getHeader("Accept") == ["a", "l"]
	assert right.getHeader("Accept") == ["a", "r"]
	assert m.getHeader("Accept") == ["a"]
	# Deriving something else than headers still copies them
	other = m.withProtocolVersion("1.0")
	assert other._headers is not m._headers


def test_non_string_names_match_nothing():
	m = HTTPMessage({"Accept": "a"})
	assert not m.hasHeader(None)
	assert m.getHeader(None) == []
	assert m.getHeaderLine(None) == ""
	m2 = m.withoutHeader(None)
	assert m2 is not m
	assert m2.getHeaders() == {"Accept": ["a"]}


def test_header_updates_copy_once(monkeypatch):
	m = HTTPMessage({"Accept": "a"})
	copies = []
	original = HTTPHeaderBag.copy

	def counted(self):
		copies.append(self)
		return original(self)

	monkeypatch.setattr(HTTPHeaderBag, "copy", counted)
	m.withHeader("Host", "h")
	m.withAddedHeader("Accept", "b")
	m.withoutHeader("Accept")
	m.withProtocolVersion("1.0")
	assert len(copies) == 4


def test_snapshot_does_not_leak():
	m = HTTPMessage({"Accept": "a"})
	m.getHeaders()["Accept"].append("b")
	m.getHeader("Accept").append("c")
	assert m.getHeader("Accept") == ["a"]


def test_rejections():
	m = HTTPMessage({"Accept": "a"})
	with pytest.raises(InvalidHeaderName):
		m.withHeader("Bad Name:", "v")
	with pytest.raises(InvalidHeaderValue):
		m.withHeader("X", "line1\r\nline2")
	with pytest.raises(InvalidHeaderValue):
		m.withHeader("X", [])
	with pytest.raises(InvalidHeaderValue):
		m.withAddedHeader("Accept", "")
	with pytest.raises(InvalidHeaderValue):
		m.withAddedHeader("Accept", ["ok", "bad\n"])
	with pytest.raises(InvalidHeader):
		m.withAddedHeader("", "v")
	assert m.getHeaders() == {"Accept": ["a"]}


def test_uniform_validation_single_or_list():
	m = HTTPMessage()
	for value in ("", [""]):
		with pytest.raises(InvalidHeaderValue):
			m.withAddedHeader("X", value)
	for value in ("a\nb", ["a\nb"]):
		with pytest.raises(InvalidHeaderValue):
			m.withHeader("X", value)


def test_protocol_version():
	m = HTTPMessage()
	m2 = m.withProtocolVersion("2")
	assert m2.getProtocolVersion() == "2"
	assert m.getProtocolVersion() == "1.1"
	for version in ("", "1 .1", "1.1\r\n", None):
		with pytest.raises(InvalidProtocolVersion):
			m.withProtocolVersion(version)  # type: ignore[arg-type]
	with pytest.raises(InvalidProtocolVersion):
		HTTPMessage(protocolVersion="")


def test_body():
	body = HTTPBytesStream(b"hello")
	m = HTTPMessage()
	m2 = m.withBody(body)
	assert m2.getBody() is body
	assert m.getBody() is not body
	for value in (None, b"raw", "text", object()):
		with pytest.raises(InvalidBody):
			m.withBody(value)  # type: ignore[arg-type]


def test_constructor_body_content():
	assert HTTPMessage(body=b"raw").getBody().getContents() == b"raw"
	assert HTTPMessage(body="text").getBody().getContents() == b"text"
	with pytest.raises(InvalidBody):
		HTTPMessage(body=12)


def test_scenario():
	m = HTTPMessage().withHeader("Accept", "text/html")
	assert m.getHeaderLine("accept") == "text/html"
	m = m.withAddedHeader("Accept", "application/json")
	assert m.getHeaderLine("Accept") == "text/html, application/json"
	m = m.withoutHeader("ACCEPT")
	assert m.hasHeader("accept") is False


# -----------------------------------------------------------------------------
#
# REQUESTS & RESPONSES
#
# -----------------------------------------------------------------------------


def test_request():
	r = HTTPRequest("POST", "/items?id=1", {"Host": "example.com"}, body=b"{}")
	assert r.getMethod() == "POST"
	assert r.getRequestTarget() == "/items?id=1"
	r2 = r.withHeader("Content-Type", "application/json").withProtocolVersion("1.0")
	assert isinstance(r2, HTTPRequest)
	assert r2.getMethod() == "POST"
	assert r2.getRequestTarget() == "/items?id=1"
	assert r2.getHeaders() == {
		"Host": ["example.com"],
		"Content-Type": ["application/json"],
	}
	r3 = r2.withMethod("PUT").withRequestTarget("*")
	assert (r3.getMethod(), r3.getRequestTarget()) == ("PUT", "*")
	assert (r2.getMethod(), r2.getRequestTarget()) == ("POST", "/items?id=1")


def test_request_rejections():
	r = HTTPRequest()
	assert (r.getMethod(), r.getRequestTarget()) == ("GET", "/")
	for method in ("", "GE T", "GET\r\n"):
		with pytest.raises(InvalidMethod):
			r.withMethod(method)
	for target in ("", "/a b", "/\r\n"):
		with pytest.raises(InvalidRequestTarget):
			r.withRequestTarget(target)
	with pytest.raises(InvalidMethod):
		HTTPRequest("BAD METHOD")


def test_response():
	r = HTTPResponse()
	assert (r.getStatusCode(), r.getReasonPhrase()) == (200, "OK")
	r2 = r.withStatus(404)
	assert isinstance(r2, HTTPResponse)
	assert (r2.getStatusCode(), r2.getReasonPhrase()) == (404, "Not Found")
	r3 = r2.withStatus(299, "Custom").withHeader("X-A", "1")
	assert (r3.getStatusCode(), r3.getReasonPhrase()) == (299, "Custom")
	assert HTTPResponse(599).getReasonPhrase() == ""
	assert r.getStatusCode() == 200
	for status in (99, 600, "200", True):
		with pytest.raises(InvalidStatus):
			r.withStatus(status)  # type: ignore[arg-type]
	with pytest.raises(InvalidStatus):
		r.withStatus(200, "OK\r\nX-Injected: 1")


def test_str():
	assert "Accept" in str(HTTPMessage({"Accept": "a"}))
	assert str(HTTPRequest("GET", "/x")).startswith("Request(GET /x HTTP/1.1")
	assert repr(HTTPResponse(201)).startswith("<HTTPResponse Response(HTTP/1.1 201 Created")


# EOF
