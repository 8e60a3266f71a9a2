from enum import Enum
from typing import NamedTuple

from .api import ResponseFactory
from .body import HTTPBodyFile, THTTPBody
from .status import HTTP_STATUS

# Statuses whose responses never have a body, nor a `Content-Length`.
NO_BODY_STATUS: frozenset[int] = frozenset((204, 304))

# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------

# The header names that are not written as `Kebab-Case`, by lowercase name.
HEADER_NAMES: dict[str, str] = {
	"etag": "ETag",
	"te": "TE",
	"www-authenticate": "WWW-Authenticate",
}


def headername(name: str) -> str:
	"""Normalizes a header name, ie. `content-length` as `Content-Length`."""
	key = name.strip().lower()
	return HEADER_NAMES.get(key) or "-".join(_.capitalize() for _ in key.split("-"))


# -----------------------------------------------------------------------------
#
# PARSING
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""The parsed first line of a request."""

	method: str
	path: str
	# The query string as sent, without the `?`
	query: str
	protocol: str


class HTTPProcessingStatus(Enum):
	"""What happened on a connection, besides requests."""

	Processing = 0
	Timeout = 10
	NoData = 11
	BadFormat = 12


# -----------------------------------------------------------------------------
#
# REQUEST
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""A request head, which is also the factory of its responses."""

	__slots__ = ["method", "path", "query", "protocol", "headers"]

	def __init__(
		self,
		method: str,
		path: str,
		query: str = "",
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: str = query
		self.protocol: str = protocol
		self.headers: dict[str, str] = headers or {}

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	@property
	def keepAlive(self) -> bool:
		"""Tells if the connection may carry another request after this one."""
		if self.header("Transfer-Encoding"):
			# The body framing is not understood, the next request can't be found
			return False
		connection = (self.header("Connection") or "").lower()
		if self.protocol == "HTTP/1.0":
			return connection == "keep-alive"
		return connection != "close"

	def respond(
		self,
		status: int = 200,
		headers: dict[str, str] | None = None,
		body: THTTPBody | None = None,
	) -> "HTTPResponse":
		return HTTPResponse(status, headers, body, protocol=self.protocol)

	def __str__(self) -> str:
		query = f"?{self.query}" if self.query else ""
		return f"Request({self.method} {self.path}{query} {self.protocol})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""A response: its head, and a body held in memory or streamed from a
	file. Every response that may have a body gets a `Content-Length`, so
	that connections can be reused."""

	__slots__ = ["protocol", "status", "headers", "body"]

	def __init__(
		self,
		status: int = 200,
		headers: dict[str, str] | None = None,
		body: THTTPBody | None = None,
		*,
		protocol: str = "HTTP/1.1",
	):
		self.protocol: str = protocol
		self.status: int = status
		self.headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		if status in NO_BODY_STATUS:
			self.body: THTTPBody | None = None
		else:
			self.body = body
			self.headers["Content-Length"] = str(
				body.length if isinstance(body, HTTPBodyFile) else len(body or b"")
			)

	@property
	def message(self) -> str:
		return HTTP_STATUS.get(self.status, "Unknown Status")

	def setHeader(self, name: str, value: str | None) -> "HTTPResponse":
		if value is None:
			self.headers.pop(headername(name), None)
		else:
			self.headers[headername(name)] = value
		return self

	def head(self) -> bytes:
		"""The status line and headers, as sent on the wire."""
		head = f"{self.protocol} {self.status} {self.message}\r\n"
		head += "".join(f"{k}: {v}\r\n" for k, v in self.headers.items())
		# Header values are latin-1 (RFC 9110 §5.5)
		return f"{head}\r\n".encode("latin-1")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message})"


# EOF
