import sys
from .config import ConfigError, ServeConfig
from .server import run
from .services.static import StaticService
from .utils.logging import error, info, setLevel


def main() -> int:
	"""Serves the configured root directory, returning a non-zero status
	when the configuration is invalid or the port can't be bound."""
	try:
		config = ServeConfig.FromEnvironment().validate()
	except ConfigError as e:
		error(f"Invalid configuration: {e}", "CONFIG")
		return 1
	setLevel(config.logLevel)
	info("Serving files", Root=str(config.root), Index=config.index)
	try:
		run(
			StaticService(config),
			host=config.host,
			port=config.port,
			logRequests=config.logRequests,
		)
	except OSError as e:
		error(f"Unable to bind to {config.host}:{config.port}: {e}", "HOSTPORTERR")
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
