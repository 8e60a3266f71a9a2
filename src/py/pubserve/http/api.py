from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from ..utils.io import DEFAULT_ENCODING
from .body import HTTPBodyFile, THTTPBody
from .status import HTTP_STATUS

T = TypeVar("T")

# --
# == Response API
#
# The responses that handlers build, all expressed with the single
# `respond` primitive of the request.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		status: int = 200,
		headers: dict[str, str] | None = None,
		body: THTTPBody | None = None,
	) -> T: ...

	def respondText(
		self,
		status: int,
		text: str | None = None,
		headers: dict[str, str] | None = None,
	) -> T:
		"""A `text/plain` response, with the status phrase as default text."""
		payload = HTTP_STATUS.get(status, "Error") if text is None else text
		return self.respond(
			status,
			{"Content-Type": "text/plain"} | (headers or {}),
			payload.encode(DEFAULT_ENCODING),
		)

	def respondFile(
		self,
		path: Path,
		contentType: str,
		length: int,
		*,
		offset: int = 0,
		status: int = 200,
		headers: dict[str, str] | None = None,
	) -> T:
		"""Streams `length` bytes of the file at `path`, from `offset`."""
		return self.respond(
			status,
			{"Content-Type": contentType} | (headers or {}),
			HTTPBodyFile(path, offset, length),
		)

	def notModified(self, headers: dict[str, str] | None = None) -> T:
		return self.respond(304, headers)

	def notFound(self) -> T:
		return self.respondText(404)

	def fail(self) -> T:
		return self.respondText(500)

	def redirect(self, location: str, permanent: bool = False) -> T:
		# SEE: https://developer.mozilla.org/en-US/docs/Web/HTTP/Redirections
		return self.respond(301 if permanent else 302, {"Location": location})


# EOF
