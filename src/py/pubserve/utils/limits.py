import resource
from enum import Enum
from typing import NamedTuple


class LimitType(Enum):
	Files = resource.RLIMIT_NOFILE


# Some platforms (Darwin) report huge hard limits that `setrlimit` rejects,
# so targets are capped.
REASONABLE_LIMITS: dict[LimitType, int] = {LimitType.Files: 102_400}


class Limit(NamedTuple):
	type: LimitType
	soft: int
	hard: int


def limit(scope: LimitType) -> Limit:
	soft, hard = resource.getrlimit(scope.value)
	return Limit(scope, soft, hard)


def unlimit(scope: LimitType) -> int | None:
	"""Raises the soft limit of `scope` up to its hard limit, returning the
	new soft limit, or `None` when the platform refused."""
	current = limit(scope)
	if current.soft == resource.RLIM_INFINITY:
		return current.soft
	target = current.hard
	cap = REASONABLE_LIMITS.get(scope)
	if cap and (target == resource.RLIM_INFINITY or target > cap):
		target = max(current.soft, cap)
	try:
		resource.setrlimit(scope.value, (target, current.hard))
	except (ValueError, OSError):
		return None
	return target


# EOF
