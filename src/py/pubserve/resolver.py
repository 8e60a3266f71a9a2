import os
import stat
from pathlib import Path
from typing import NamedTuple
from urllib.parse import unquote

from .http.validators import etag, httpdate
from .utils.files import contentType

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class AssetError(Exception):
	"""Base class for the per-request failures of asset resolution."""

	def __init__(self, path: str, message: str | None = None):
		super().__init__(message or path)
		self.path: str = path


class AssetNotFound(AssetError):
	"""No asset matches the path, or the path escapes the served root."""


class AssetRedirect(AssetError):
	"""The path names a directory, which must be requested with a trailing
	slash so that relative links resolve within it."""

	def __init__(self, path: str, location: str):
		super().__init__(path, f"{path} → {location}")
		self.location: str = location


class AssetReadError(AssetError):
	"""The asset exists but could not be accessed."""


# -----------------------------------------------------------------------------
#
# ASSET
#
# -----------------------------------------------------------------------------


class Asset(NamedTuple):
	"""A regular file under the served root, as it was when resolved."""

	path: Path
	size: int
	modified: float
	contentType: str
	etag: str

	@property
	def lastModified(self) -> str:
		return httpdate(self.modified)

	@staticmethod
	def FromPath(path: Path) -> "Asset":
		stats = path.stat()
		return Asset(
			path=path,
			size=stats.st_size,
			modified=stats.st_mtime,
			contentType=contentType(path),
			etag=etag(stats.st_size, stats.st_mtime),
		)


# -----------------------------------------------------------------------------
#
# RESOLVER
#
# -----------------------------------------------------------------------------


class AssetResolver:
	"""Maps URL paths to the regular files of a served root directory.
	Nothing is cached, every resolution looks at the filesystem."""

	def __init__(self, root: Path | str, index: str = "index.html"):
		self.root: Path = (root if isinstance(root, Path) else Path(root)).resolve()
		self.index: str = index

	@staticmethod
	def normalize(path: str) -> list[str] | None:
		"""Decodes and normalizes the URL path into a list of segments
		relative to the root, or `None` when the path escapes the root."""
		segments: list[str] = []
		for segment in unquote(path, errors="strict").split("/"):
			if not segment or segment == ".":
				continue
			elif segment == "..":
				if not segments:
					return None
				segments.pop()
			elif "\x00" in segment or "\\" in segment:
				return None
			else:
				segments.append(segment)
		return segments

	def locate(self, path: str) -> Path | None:
		"""Returns the local path for the given URL path, provided it is
		located within the root once symlinks are resolved."""
		try:
			segments = self.normalize(path)
		except UnicodeDecodeError:
			return None
		if segments is None:
			return None
		local_path = self.root.joinpath(*segments)
		try:
			resolved = local_path.resolve()
		except (OSError, RuntimeError):
			return None
		if resolved != self.root and self.root not in resolved.parents:
			return None
		return resolved

	def resolve(self, path: str) -> Asset:
		"""Resolves the URL path to an asset, raising an `AssetError`
		subclass when the path can't be served."""
		local_path = self.locate(path)
		if local_path is None:
			raise AssetNotFound(path, f"Path escapes the served root: {path}")
		relative = local_path.relative_to(self.root)
		if any(_.startswith(".") for _ in relative.parts):
			# Dotfiles are ignored, as if they did not exist
			raise AssetNotFound(path)
		try:
			mode = local_path.stat().st_mode
		except (FileNotFoundError, NotADirectoryError):
			raise AssetNotFound(path) from None
		except OSError as e:
			raise AssetReadError(path, f"Could not stat {local_path}: {e}") from e
		if stat.S_ISDIR(mode):
			index_path = local_path / self.index
			if not index_path.is_file():
				raise AssetNotFound(path)
			elif not path.endswith("/"):
				raise AssetRedirect(path, f"{path}/")
			local_path = index_path
		elif not stat.S_ISREG(mode) or path.endswith("/"):
			# A trailing slash only ever names a directory
			raise AssetNotFound(path)
		if not os.access(local_path, os.R_OK):
			raise AssetReadError(path, f"Asset is not readable: {local_path}")
		try:
			return Asset.FromPath(local_path)
		except FileNotFoundError:
			# The file was removed since we looked at it
			raise AssetNotFound(path) from None
		except OSError as e:
			raise AssetReadError(path, f"Could not stat {local_path}: {e}") from e


# EOF
