from ..config import ServeConfig
from ..decorators import on
from ..http.model import HTTPRequest, HTTPResponse
from ..http.validators import isFresh, isRangeFresh, parseRange
from ..model import Service
from ..resolver import (
	Asset,
	AssetNotFound,
	AssetReadError,
	AssetRedirect,
	AssetResolver,
)
from ..utils.logging import debug, warning

CACHE_CONTROL: str = "public, max-age=0"


class StaticService(Service):
	"""Serves the files of the configured root directory, and the entry
	document for `/`."""

	def __init__(self, config: ServeConfig):
		super().__init__()
		self.config: ServeConfig = config
		self.resolver: AssetResolver = AssetResolver(config.root, config.index)

	def validators(self, asset: Asset) -> dict[str, str]:
		return {
			"Last-Modified": asset.lastModified,
			"ETag": asset.etag,
			"Cache-Control": CACHE_CONTROL,
		}

	def respondAsset(self, request: HTTPRequest, asset: Asset) -> HTTPResponse:
		"""Responds with the asset, honouring conditional and range requests.
		The size from the asset's single `stat` drives both the headers and
		the bytes sent."""
		headers = self.validators(asset)
		if isFresh(request.headers, asset.etag, asset.modified):
			return request.notModified(headers)
		headers["Accept-Ranges"] = "bytes"
		range_header = request.header("Range")
		if range_header and isRangeFresh(request.headers, asset.etag, asset.modified):
			byte_range = parseRange(range_header, asset.size)
			if byte_range is False:
				return request.respondText(
					416, headers={"Content-Range": f"bytes */{asset.size}"}
				)
			elif byte_range is not None:
				headers["Content-Range"] = byte_range.contentRange
				return request.respondFile(
					asset.path,
					asset.contentType,
					byte_range.length,
					offset=byte_range.start,
					status=206,
					headers=headers,
				)
		return request.respondFile(
			asset.path, asset.contentType, asset.size, headers=headers
		)

	def respondError(self, request: HTTPRequest, error: Exception) -> HTTPResponse:
		if isinstance(error, AssetRedirect):
			# The query is kept as sent
			query = f"?{request.query}" if request.query else ""
			return request.redirect(f"{error.location}{query}", permanent=True)
		elif isinstance(error, AssetReadError):
			warning("Asset could not be read", Path=request.path, Reason=str(error))
			return request.fail()
		else:
			debug("Asset not found", Path=request.path, Reason=str(error))
			return request.notFound()

	@on(GET_HEAD="/{path:any}")
	def asset(self, request: HTTPRequest, path: str) -> HTTPResponse:
		try:
			asset = self.resolver.resolve(request.path)
		except (AssetNotFound, AssetRedirect, AssetReadError) as e:
			return self.respondError(request, e)
		return self.respondAsset(request, asset)

	@on(priority=1, GET_HEAD="/")
	def entry(self, request: HTTPRequest) -> HTTPResponse:
		"""The root path is served from the root directory when it has a
		matching asset, and falls back to the entry document otherwise."""
		try:
			asset = self.resolver.resolve(request.path)
		except AssetNotFound:
			try:
				asset = Asset.FromPath(self.config.entry)
			except FileNotFoundError:
				warning("Entry document is missing", Path=str(self.config.entry))
				return request.notFound()
			except OSError as e:
				warning("Entry document could not be read", Reason=str(e))
				return request.fail()
			asset = asset._replace(contentType="text/html")
		except (AssetRedirect, AssetReadError) as e:
			return self.respondError(request, e)
		return self.respondAsset(request, asset)


# EOF
