import mimetypes
from pathlib import Path

mimetypes.init()

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

# Looked up before `mimetypes`, so that the common web types do not depend
# on the host's MIME database.
MIME_TYPES: dict[str, str] = dict(
	html="text/html",
	htm="text/html",
	css="text/css",
	js="application/javascript",
	mjs="application/javascript",
	json="application/json",
	map="application/json",
	png="image/png",
	svg="image/svg+xml",
	txt="text/plain",
	xml="application/xml",
	jpg="image/jpeg",
	jpeg="image/jpeg",
	gif="image/gif",
	webp="image/webp",
	ico="image/x-icon",
	woff="font/woff",
	woff2="font/woff2",
	wasm="application/wasm",
	pdf="application/pdf",
)


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the extension of the given path"""
	name = Path(path).name
	ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
	return (
		res
		if (res := MIME_TYPES.get(ext))
		else mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE
	)


# EOF
