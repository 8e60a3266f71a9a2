DEFAULT_ENCODING: str = "utf8"
CRLF: bytes = b"\r\n"


class LineParser:
	"""Splits a byte stream into CRLF-terminated lines, keeping the
	incomplete tail of the stream in `pending` until its end arrives."""

	__slots__ = ["pending"]

	def __init__(self) -> None:
		self.pending: bytearray = bytearray()

	def reset(self) -> "LineParser":
		self.pending.clear()
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Consumes `chunk` from `start` up to the end of the first line,
		returning the line without its CRLF (or `None` when it is not
		complete yet) and the number of bytes consumed."""
		if self.pending.endswith(b"\r") and chunk[start : start + 1] == b"\n":
			# The delimiter was split across chunks
			line = bytes(self.pending[:-1])
			self.pending.clear()
			return line, 1
		end = chunk.find(CRLF, start)
		if end == -1:
			self.pending += chunk[start:]
			return None, len(chunk) - start
		elif self.pending:
			line = bytes(self.pending) + chunk[start:end]
			self.pending.clear()
		else:
			line = chunk[start:end]
		return line, end - start + len(CRLF)


# EOF
