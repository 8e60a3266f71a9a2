from typing import ClassVar

from .http.model import HTTPRequest, HTTPResponse
from .routing import Dispatcher, Handler
from .utils.logging import debug, exception

# -----------------------------------------------------------------------------
#
# SERVICE
#
# -----------------------------------------------------------------------------


class Service:
	"""A set of request handlers, declared as methods decorated with `@on`,
	mounted under an optional path prefix."""

	PREFIX: ClassVar[str] = ""

	def __init__(self, name: str | None = None, *, prefix: str | None = None):
		self.name: str = name or type(self).__name__
		self.prefix: str = self.PREFIX if prefix is None else prefix
		self.app: Application | None = None

	@property
	def handlers(self) -> list[Handler]:
		"""The handlers declared by the service class, bound to the service."""
		handlers: list[Handler] = []
		for name in dir(type(self)):
			# Looking on the class does not evaluate properties
			if Handler.Has(getattr(type(self), name, None)):
				if handler := Handler.Get(getattr(self, name)):
					handlers.append(handler)
		return handlers

	async def start(self) -> None:
		"""Called before the server accepts connections."""

	async def stop(self) -> None:
		"""Called once the server stopped accepting connections."""

	def __repr__(self) -> str:
		return f"(Service {self.name}{' :mounted' if self.app else ''})"


# -----------------------------------------------------------------------------
#
# APPLICATION
#
# -----------------------------------------------------------------------------


class Application:
	"""Routes requests to the handlers of the mounted services."""

	def __init__(self, services: list[Service] | None = None):
		self.dispatcher: Dispatcher = Dispatcher()
		self.services: list[Service] = []
		for service in services or ():
			self.mount(service)

	def mount(self, service: Service) -> Service:
		if service.app:
			raise RuntimeError(f"Service is already mounted: {service}")
		for handler in service.handlers:
			self.dispatcher.register(handler, service.prefix)
		service.app = self
		self.services.append(service)
		return service

	async def start(self) -> None:
		for service in self.services:
			await service.start()

	async def stop(self) -> None:
		for service in self.services:
			await service.stop()

	async def process(self, request: HTTPRequest) -> HTTPResponse:
		"""Returns the response to the request, which is a 404 when no
		route matches and a 500 when the handler fails."""
		route, params = self.dispatcher.match(request.method, request.path)
		if route is None:
			debug("No route found", Method=request.method, Path=request.path)
			return request.notFound()
		try:
			return await route.handler(request, params)
		except Exception as e:
			exception(e, f"Handler failed for {request.method} {request.path}")
			return request.fail()


def mount(*components: Application | Service) -> Application:
	"""Returns the first given application, or a new one, with all the given
	services mounted."""
	app = next((_ for _ in components if isinstance(_, Application)), None)
	app = app or Application()
	for component in components:
		if isinstance(component, Service):
			app.mount(component)
		elif not isinstance(component, Application):
			raise RuntimeError(f"Unsupported component {type(component)}: {component}")
	return app


# EOF
