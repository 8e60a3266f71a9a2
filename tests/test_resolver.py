from pathlib import Path

import pytest

from pubserve.resolver import (
	AssetNotFound,
	AssetReadError,
	AssetRedirect,
	AssetResolver,
)
from pubserve.utils.files import contentType


@pytest.mark.parametrize(
	"path,segments",
	[
		("/", []),
		("/style.css", ["style.css"]),
		("//docs///guide.html", ["docs", "guide.html"]),
		("/docs/./../style.css", ["style.css"]),
		("/with%20space.txt", ["with space.txt"]),
		("/a/b/../../c", ["c"]),
	],
)
def test_normalize(path: str, segments: list[str]):
	assert AssetResolver.normalize(path) == segments


@pytest.mark.parametrize(
	"path",
	[
		"/..",
		"/../../etc/passwd",
		"/%2e%2e/secret.txt",
		"/%2E%2E%2Fsecret.txt",
		"/docs/../../secret.txt",
		"/a%00b",
		"/..%5csecret.txt",
	],
)
def test_normalize_escapes(path: str):
	assert AssetResolver.normalize(path) is None


def test_resolve_asset(public: Path):
	asset = AssetResolver(public).resolve("/logo.png")
	assert asset.path == (public / "logo.png").resolve()
	assert asset.size == (public / "logo.png").stat().st_size
	assert asset.contentType == "image/png"
	assert asset.etag.startswith('W/"')
	assert asset.lastModified.endswith(" GMT")


def test_resolve_root_and_directory_index(public: Path):
	resolver = AssetResolver(public)
	assert resolver.resolve("/").path.name == "index.html"
	assert resolver.resolve("/docs/").path == (public / "docs" / "index.html").resolve()


def test_directory_without_slash_redirects(public: Path):
	with pytest.raises(AssetRedirect) as info:
		AssetResolver(public).resolve("/docs")
	assert info.value.location == "/docs/"


@pytest.mark.parametrize(
	"path",
	[
		"/does-not-exist.xyz",
		"/../secret.txt",
		"/%2e%2e/secret.txt",
		"/.env",
		"/docs/.././.env",
		"/empty/",
		"/empty",
		"/style.css/",
		"/style.css/nested",
		"/%ff",
	],
)
def test_resolve_not_found(public: Path, path: str):
	with pytest.raises(AssetNotFound):
		AssetResolver(public).resolve(path)


def test_symlink_outside_root_is_not_found(public: Path):
	(public / "leak.txt").symlink_to(public.parent / "secret.txt")
	with pytest.raises(AssetNotFound):
		AssetResolver(public).resolve("/leak.txt")


def test_symlink_inside_root_is_served(public: Path):
	(public / "alias.css").symlink_to(public / "style.css")
	asset = AssetResolver(public).resolve("/alias.css")
	assert asset.path == (public / "style.css").resolve()
	assert asset.contentType == "text/css"


def test_unreadable_asset(public: Path, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setattr("pubserve.resolver.os.access", lambda path, mode: False)
	with pytest.raises(AssetReadError):
		AssetResolver(public).resolve("/style.css")


def test_changes_are_picked_up(public: Path):
	resolver = AssetResolver(public)
	with pytest.raises(AssetNotFound):
		resolver.resolve("/late.txt")
	(public / "late.txt").write_text("late")
	assert resolver.resolve("/late.txt").size == 4


@pytest.mark.parametrize(
	"name,expected",
	[
		("index.html", "text/html"),
		("style.css", "text/css"),
		("app.js", "application/javascript"),
		("data.json", "application/json"),
		("logo.png", "image/png"),
		("icon.svg", "image/svg+xml"),
		("LOGO.PNG", "image/png"),
		("blob.unknownext", "application/octet-stream"),
		("noextension", "application/octet-stream"),
	],
)
def test_content_type(name: str, expected: str):
	assert contentType(name) == expected


# EOF
