import re
from inspect import isawaitable
from typing import Any, Awaitable, Callable, ClassVar, Pattern

from .decorators import Meta
from .http.model import HTTPRequest, HTTPResponse
from .utils.logging import debug

# -----------------------------------------------------------------------------
#
# HANDLER
#
# -----------------------------------------------------------------------------


class Handler:
	"""Wraps a service method decorated with `@on`: the `(method, path)`
	pairs it answers and the priority it has over other handlers matching
	the same request."""

	@staticmethod
	def Has(value: Any) -> bool:
		return hasattr(value, Meta.ON)

	@staticmethod
	def Get(value: Any) -> "Handler | None":
		if not Handler.Has(value):
			return None
		return Handler(
			value, getattr(value, Meta.ON), getattr(value, Meta.ON_PRIORITY, 0)
		)

	def __init__(
		self,
		functor: Callable[..., HTTPResponse | Awaitable[HTTPResponse]],
		methods: list[tuple[str, str]],
		priority: int = 0,
	):
		self.functor = functor
		self.methods: list[tuple[str, str]] = list(methods)
		self.priority: int = priority

	async def __call__(
		self, request: HTTPRequest, params: dict[str, Any]
	) -> HTTPResponse:
		response = self.functor(request, **params)
		return await response if isawaitable(response) else response

	def __repr__(self) -> str:
		return f"(Handler {self.priority} {self.methods} '{self.functor}')"


# -----------------------------------------------------------------------------
#
# ROUTE
#
# -----------------------------------------------------------------------------


class Route:
	"""A path template where parameters are written `{name}` or
	`{name:type}`, like `/assets/{path:any}`. The parameters are extracted
	from matching paths and passed to the handler as keyword arguments."""

	TYPES: ClassVar[dict[str, tuple[str, Callable[[str], Any]]]] = {
		"segment": (r"[^/]+", str),
		"digits": (r"\d+", int),
		"rest": (r".+", str),
		"any": (r".*", str),
	}

	RE_PARAMETER: ClassVar[Pattern[str]] = re.compile(r"\{(\w+)(?::(\w+))?\}")

	def __init__(self, template: str, handler: Handler):
		self.template: str = template
		self.handler: Handler = handler
		self.converters: dict[str, Callable[[str], Any]] = {}
		expr: list[str] = []
		end: int = 0
		for match in self.RE_PARAMETER.finditer(template):
			name, kind = match.group(1), match.group(2) or "segment"
			if kind not in self.TYPES:
				raise ValueError(
					f"Unknown parameter type '{kind}' in route {template!r}, pick one of: {', '.join(self.TYPES)}"
				)
			pattern, self.converters[name] = self.TYPES[kind]
			expr.append(re.escape(template[end : match.start()]))
			expr.append(f"(?P<{name}>{pattern})")
			end = match.end()
		expr.append(re.escape(template[end:]))
		self.regexp: Pattern[str] = re.compile("".join(expr))

	@property
	def priority(self) -> int:
		return self.handler.priority

	def match(self, path: str) -> dict[str, Any] | None:
		"""Returns the parameters extracted from `path`, or `None` when the
		path does not match."""
		matched = self.regexp.fullmatch(path)
		if not matched:
			return None
		return {k: convert(matched.group(k)) for k, convert in self.converters.items()}

	def __repr__(self) -> str:
		return f"(Route {self.template!r} {self.regexp.pattern!r})"


# -----------------------------------------------------------------------------
#
# DISPATCHER
#
# -----------------------------------------------------------------------------


class Dispatcher:
	"""Finds the route of a request among the registered handlers."""

	def __init__(self) -> None:
		self.routes: dict[str, list[Route]] = {}

	def register(self, handler: Handler, prefix: str = "") -> "Dispatcher":
		for method, path in handler.methods:
			template = "/" + f"{prefix}{path}".lstrip("/")
			debug("Registered route", Method=method, Path=template)
			self.routes.setdefault(method, []).append(Route(template, handler))
		return self

	def match(self, method: str, path: str) -> tuple[Route | None, dict[str, Any]]:
		"""Returns the route with the highest priority matching `method` and
		`path`, with its parameters. Among routes of the same priority, the
		first registered wins."""
		best: Route | None = None
		best_params: dict[str, Any] = {}
		for route in self.routes.get(method, ()):
			if best is not None and route.priority <= best.priority:
				continue
			params = route.match(path)
			if params is not None:
				best, best_params = route, params
		return best, best_params


# EOF
