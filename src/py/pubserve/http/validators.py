from datetime import timezone
from email.utils import formatdate, parsedate_to_datetime
from typing import Literal, NamedTuple
import re

# --
# == Validators
#
# Cache validators (`ETag`, `Last-Modified`), conditional request evaluation
# (RFC 9110 §13) and single byte range parsing (RFC 9110 §14).

RE_RANGE = re.compile(r"^\s*bytes\s*=\s*(?P<start>\d*)\s*-\s*(?P<end>\d*)\s*$")


class ByteRange(NamedTuple):
	"""An inclusive byte range within a representation of `size` bytes."""

	start: int
	end: int
	size: int

	@property
	def length(self) -> int:
		return self.end - self.start + 1

	@property
	def contentRange(self) -> str:
		return f"bytes {self.start}-{self.end}/{self.size}"


def httpdate(timestamp: float) -> str:
	"""Formats a POSIX timestamp as an IMF-fixdate, ie.
	`Sun, 06 Nov 1994 08:49:37 GMT`."""
	return formatdate(int(timestamp), usegmt=True)


def parsehttpdate(value: str | None) -> float | None:
	"""Parses an HTTP date, returning `None` when the value is absent or
	malformed, in which case the header must be ignored."""
	if not value:
		return None
	try:
		parsed = parsedate_to_datetime(value)
	except (TypeError, ValueError, IndexError):
		return None
	# A `-0000` zone gives a naive datetime, HTTP dates are always UTC
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed.timestamp()


def etag(size: int, modified: float) -> str:
	"""Returns a weak entity tag derived from size and modification time."""
	return f'W/"{size:x}-{int(modified * 1000):x}"'


def etagMatches(header: str, tag: str) -> bool:
	"""Weak comparison of `tag` against a comma-separated list of entity
	tags, as used by `If-None-Match`."""
	header = header.strip()
	if header == "*":
		return True
	opaque = tag.removeprefix("W/")
	return any(_.strip().removeprefix("W/") == opaque for _ in header.split(","))


def isFresh(headers: dict[str, str], tag: str, modified: float) -> bool:
	"""Tells if the client's cached copy, described by the conditional
	request headers, is still valid for the representation identified by
	`tag` and `modified`. `If-None-Match` takes precedence over
	`If-Modified-Since`."""
	if "no-cache" in (headers.get("Cache-Control") or "").lower():
		return False
	if (none_match := headers.get("If-None-Match")) is not None:
		return etagMatches(none_match, tag)
	if (since := parsehttpdate(headers.get("If-Modified-Since"))) is not None:
		# HTTP dates have a one second resolution
		return int(modified) <= since
	return False


def isRangeFresh(headers: dict[str, str], tag: str, modified: float) -> bool:
	"""Evaluates `If-Range`: the range applies only when the validator it
	carries still matches the current representation."""
	if_range = headers.get("If-Range")
	if not if_range:
		return True
	elif '"' in if_range:
		return if_range.strip() == tag
	else:
		since = parsehttpdate(if_range)
		return since is not None and int(modified) <= since


def parseRange(header: str | None, size: int) -> ByteRange | Literal[False] | None:
	"""Parses a `Range` header against a representation of `size` bytes.
	Returns the range to serve, `False` when the range can't be satisfied,
	or `None` when the header is absent, malformed or asks for more than
	one range, which means the whole representation is served."""
	if not header:
		return None
	match = RE_RANGE.match(header)
	if not match:
		return None
	start_text, end_text = match.group("start"), match.group("end")
	if not start_text and not end_text:
		return None
	elif not start_text:
		# Suffix range, the last `n` bytes
		start = max(0, size - int(end_text))
		end = size - 1
	else:
		start = int(start_text)
		end = min(size - 1, int(end_text)) if end_text else size - 1
	if start >= size or start > end:
		return False
	return ByteRange(start, end, size)


# EOF
