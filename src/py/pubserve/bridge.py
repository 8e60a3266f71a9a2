import asyncio

from .http.body import HTTPBodyWriter
from .http.model import HTTPProcessingStatus, HTTPRequest
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .server import SERVER_BAD_REQUEST, sendResponse


class BufferedBodyWriter(HTTPBodyWriter):
	"""Keeps everything written in memory."""

	def __init__(self) -> None:
		super().__init__()
		self.buffer: bytearray = bytearray()

	async def _writeBytes(self, data: bytes) -> None:
		self.buffer += data


class Bridge:
	"""Runs an application without sockets: raw request bytes go in, and
	the bytes the server would have sent on the connection come out."""

	def __init__(self, application: Application):
		self.application: Application = application

	async def arequest(self, data: bytes) -> bytes:
		writer = BufferedBodyWriter()
		for atom in HTTPParser().feed(data):
			if atom is HTTPProcessingStatus.BadFormat:
				writer.buffer += SERVER_BAD_REQUEST
				break
			elif isinstance(atom, HTTPRequest):
				await sendResponse(
					atom, self.application, writer, keepAlive=atom.keepAlive
				)
				if not atom.keepAlive or writer.shouldClose:
					break
		return bytes(writer.buffer)

	def request(self, data: bytes) -> bytes:
		return asyncio.run(self.arequest(data))


def run(*components: Application | Service) -> Bridge:
	"""Returns a bridge to the application made of the given components."""
	return Bridge(mount(*components))


# EOF
