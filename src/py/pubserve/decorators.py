from typing import Any, Callable, ClassVar, TypeVar

T = TypeVar("T")


class Meta:
	"""Names of the attributes that decorators set on the functions they
	annotate."""

	ON: ClassVar[str] = "_pubserve_on"
	ON_PRIORITY: ClassVar[str] = "_pubserve_on_priority"

	@staticmethod
	def Get(function: Any) -> dict[str, Any]:
		if not hasattr(function, "__dict__"):
			raise RuntimeError(f"Metadata cannot be attached to: {function}")
		attributes: dict[str, Any] = function.__dict__
		return attributes


def on(
	priority: int = 0, **methods: str | list[str] | tuple[str, ...]
) -> Callable[[T], T]:
	"""Declares a service method as the handler of the given HTTP methods
	and path templates (see `Route`). Method names can be joined with `_`:

	>    @on(GET_HEAD="/assets/{path:any}")
	>    def asset(self, request, path):
	>        return request.respondFile(...)

	When several handlers match a request, the highest `priority` wins."""

	def decorator(function: T) -> T:
		meta = Meta.Get(function)
		routes: list[tuple[str, str]] = meta.setdefault(Meta.ON, [])
		meta.setdefault(Meta.ON_PRIORITY, priority)
		for names, paths in methods.items():
			templates = [paths] if isinstance(paths, str) else list(paths)
			routes += [
				(name, template)
				for name in names.upper().split("_")
				for template in templates
			]
		return function

	return decorator


# EOF
