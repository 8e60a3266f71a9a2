import re
from typing import Iterator, TypeAlias

from ..utils.io import LineParser
from .model import HTTPProcessingStatus, HTTPRequest, HTTPRequestLine, headername

# The most bytes a request head (request line and headers) may take.
MAX_HEAD: int = 16_384

RE_METHOD = re.compile(r"^[A-Z]+$")
RE_PROTOCOL = re.compile(r"^HTTP/1\.[01]$")

# What the parser produces while fed
HTTPAtom: TypeAlias = HTTPRequest | HTTPProcessingStatus


def parseRequestLine(line: bytes) -> HTTPRequestLine | None:
	"""Parses a `METHOD target HTTP/1.x` line, returning `None` for
	anything else, including status lines."""
	try:
		method, target, protocol = line.decode("ascii").split(" ")
	except (UnicodeDecodeError, ValueError):
		return None
	if not (RE_METHOD.match(method) and RE_PROTOCOL.match(protocol)):
		return None
	if target.startswith(("http://", "https://")):
		# Absolute form, only the path and query are kept (RFC 9112 §3.2.2)
		authority_and_path = target.split("/", 3)
		target = f"/{authority_and_path[3]}" if len(authority_and_path) == 4 else "/"
	elif not target.startswith("/") and target != "*":
		return None
	path, _, query = target.partition("?")
	return HTTPRequestLine(method, path, query, protocol)


class HTTPParser:
	"""Parses the requests of a connection as its bytes are fed, yielding
	each request as soon as its head is complete, so pipelined requests
	that come in the same chunk are all yielded.

	Request bodies are skipped without being kept, as no handler reads
	them. A head that is malformed or larger than `maxHead` yields
	`BadFormat`, and everything fed afterwards is ignored."""

	def __init__(self, maxHead: int = MAX_HEAD) -> None:
		self.line: LineParser = LineParser()
		self.maxHead: int = maxHead
		self.requestLine: HTTPRequestLine | None = None
		self.headers: dict[str, str] = {}
		# Bytes of the current head read so far
		self.headSize: int = 0
		# Bytes of the last request's body still to be skipped
		self.skipping: int = 0
		self.failed: bool = False

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		offset: int = 0
		while offset < len(chunk) and not self.failed:
			if self.skipping:
				skipped = min(self.skipping, len(chunk) - offset)
				self.skipping -= skipped
				offset += skipped
				continue
			line, read = self.line.feed(chunk, offset)
			offset += read
			self.headSize += read
			if self.headSize > self.maxHead:
				yield self.fail()
			elif line is None:
				continue
			elif self.requestLine is None:
				# Empty lines before a request line are tolerated (RFC 9112 §2.2)
				if line:
					self.requestLine = parseRequestLine(line)
					if self.requestLine is None:
						yield self.fail()
			elif line:
				name, colon, value = line.decode("latin-1").partition(":")
				if not colon or not name or name != name.strip():
					yield self.fail()
				else:
					self.headers[headername(name)] = value.strip()
			else:
				length = self.headers.get("Content-Length", "0")
				valid = length.isascii() and length.isdigit()
				yield self.complete(int(length)) if valid else self.fail()

	def complete(self, bodyLength: int) -> HTTPRequest:
		"""Returns the request whose head was just parsed, and prepares for
		the next one, after the body is skipped."""
		assert self.requestLine is not None  # nosec: B101
		method, path, query, protocol = self.requestLine
		request = HTTPRequest(method, path, query, self.headers, protocol)
		self.requestLine = None
		self.headers = {}
		self.headSize = 0
		self.skipping = bodyLength
		return request

	def fail(self) -> HTTPProcessingStatus:
		self.failed = True
		self.line.reset()
		return HTTPProcessingStatus.BadFormat


# EOF
