import os
from pathlib import Path
from typing import Mapping, NamedTuple

from .utils.logging import LOG_LEVELS

PORT: int = 3000

# The server is meant to be reachable from outside a container
HOST: str = "0.0.0.0"  # nosec: B104

ROOT: str = "public"
INDEX: str = "index.html"
LOG_LEVEL: str = "info"


class ConfigError(Exception):
	"""The configuration can't be used, the process must not start."""


def parsePort(value: str | None, default: int = PORT) -> int:
	"""Parses a TCP port, using `default` when the value is unset or empty."""
	if value is None or not value.strip():
		return default
	try:
		port = int(value.strip())
	except ValueError as e:
		raise ConfigError(f"Port is not an integer: {value!r}") from e
	if not 0 <= port <= 65535:
		raise ConfigError(f"Port is out of the 0-65535 range: {port}")
	return port


class ServeConfig(NamedTuple):
	"""The process-wide configuration, built once at startup and passed
	explicitly to the components that need it."""

	root: Path = Path(ROOT)
	index: str = INDEX
	host: str = HOST
	port: int = PORT
	logLevel: str = LOG_LEVEL
	logRequests: bool = True

	@staticmethod
	def FromEnvironment(env: Mapping[str, str] | None = None) -> "ServeConfig":
		"""Reads the configuration from the environment (`os.environ` by
		default). This only parses values, see `validate` for the checks
		against the filesystem."""
		env = os.environ if env is None else env
		level = (env.get("PUBSERVE_LOG_LEVEL") or LOG_LEVEL).strip().lower()
		if level not in LOG_LEVELS:
			raise ConfigError(
				f"Unknown log level {level!r}, pick one of: {', '.join(LOG_LEVELS)}"
			)
		return ServeConfig(
			root=Path(env.get("PUBSERVE_ROOT") or ROOT),
			index=env.get("PUBSERVE_INDEX") or INDEX,
			host=env.get("HOST") or HOST,
			port=parsePort(env.get("PORT")),
			logLevel=level,
			logRequests=env.get("PUBSERVE_LOG_REQUESTS", "1") == "1",
		)

	def validate(self) -> "ServeConfig":
		"""Ensures the served root is a directory holding the entry document,
		returning a configuration with an absolute root."""
		root = self.root.absolute()
		if not root.exists():
			raise ConfigError(f"Served root does not exist: {root}")
		elif not root.is_dir():
			raise ConfigError(f"Served root is not a directory: {root}")
		if "/" in self.index or self.index in ("", ".", ".."):
			raise ConfigError(f"Entry document must be a file name: {self.index!r}")
		index = root / self.index
		if not index.is_file():
			raise ConfigError(f"Entry document is missing: {index}")
		return self._replace(root=root)

	@property
	def entry(self) -> Path:
		return self.root / self.index


# EOF
