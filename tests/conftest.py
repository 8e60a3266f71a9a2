from pathlib import Path
from typing import Callable, NamedTuple

import pytest

from pubserve.bridge import Bridge, run
from pubserve.config import ServeConfig
from pubserve.services.static import StaticService

INDEX_HTML: bytes = b"<!DOCTYPE html><html><body>Entry</body></html>\n"
PNG: bytes = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4


class Response(NamedTuple):
	status: int
	headers: dict[str, str]
	body: bytes


def parseResponse(raw: bytes) -> Response:
	head, _, body = raw.partition(b"\r\n\r\n")
	lines = head.decode("latin-1").split("\r\n")
	status = int(lines[0].split(" ", 2)[1])
	headers = dict(_.split(": ", 1) for _ in lines[1:])
	return Response(status, headers, body)


@pytest.fixture
def public(tmp_path: Path) -> Path:
	"""A served root with a few assets, and a secret file next to it."""
	root = tmp_path / "public"
	root.mkdir()
	(root / "index.html").write_bytes(INDEX_HTML)
	(root / "style.css").write_text("body { color: red; }\n")
	(root / "app.js").write_text("console.log('app')\n")
	(root / "data.json").write_text('{"ok": true}\n')
	(root / "logo.png").write_bytes(PNG)
	(root / "icon.svg").write_text('<svg xmlns="http://www.w3.org/2000/svg"/>\n')
	(root / "blob.unknownext").write_bytes(b"\x00\x01\x02")
	(root / "empty.txt").write_bytes(b"")
	(root / "with space.txt").write_text("spaced\n")
	(root / ".env").write_text("SECRET=1\n")
	(root / "docs").mkdir()
	(root / "docs" / "index.html").write_text("<p>Docs</p>\n")
	(root / "docs" / "guide.html").write_text("<p>Guide</p>\n")
	(root / "empty").mkdir()
	(tmp_path / "secret.txt").write_text("TOP SECRET\n")
	return root


@pytest.fixture
def config(public: Path) -> ServeConfig:
	return ServeConfig(root=public).validate()


@pytest.fixture
def bridge(config: ServeConfig) -> Bridge:
	return run(StaticService(config))


@pytest.fixture
def fetch(bridge: Bridge) -> Callable[..., Response]:
	"""Sends a single request through the bridge and parses the response."""

	def fetch(
		path: str,
		method: str = "GET",
		headers: dict[str, str] | None = None,
	) -> Response:
		lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
		lines += [f"{k}: {v}" for k, v in (headers or {}).items()]
		return parseResponse(bridge.request(("\r\n".join(lines) + "\r\n\r\n").encode()))

	return fetch


# EOF
