from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple, TypeAlias


class HTTPBodyFile(NamedTuple):
	"""A response body made of `length` bytes of a file, read from
	`offset`. The length is fixed when the response is built, so that the
	bytes sent always match the announced `Content-Length`."""

	path: Path
	offset: int
	length: int


# Bodies are either in memory or streamed from a file
THTTPBody: TypeAlias = bytes | HTTPBodyFile


class HTTPBodyWriter(ABC):
	"""Sends the parts of responses. Once `shouldClose` is set, what was
	sent can't be relied on to delimit another response and the connection
	must be closed."""

	__slots__ = ["shouldClose"]

	def __init__(self) -> None:
		self.shouldClose: bool = False

	async def write(self, body: THTTPBody | None) -> None:
		if body is None:
			return
		elif isinstance(body, HTTPBodyFile):
			if body.length > 0 and await self._writeFile(body) < body.length:
				# The file shrank since its size was announced
				self.shouldClose = True
		else:
			await self._writeBytes(body)

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> int:
		"""Writes at most `body.length` bytes of the file, returning how
		many were actually written."""
		written: int = 0
		with open(body.path, "rb") as f:
			f.seek(body.offset)
			while written < body.length:
				chunk = f.read(min(size, body.length - written))
				if not chunk:
					break
				await self._writeBytes(chunk)
				written += len(chunk)
		return written

	@abstractmethod
	async def _writeBytes(self, data: bytes) -> None: ...


# EOF
