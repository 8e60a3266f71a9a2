import sys
import traceback
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, TextIO

from .term import Term

# --
# == Logging
#
# Lines are written to stderr as `[origin] message Key=value…`, coloured by
# level when the terminal allows it. Entries below the process-wide level
# are dropped before being formatted.

# Values that can be given as the context of an entry
TLogValue = bool | int | float | str | bytes | None

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="pubserve")


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An unexpected error, always logged


LEVEL_COLORS: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

# The levels that can be configured, by name
LOG_LEVELS: dict[str, LogLevel] = {
	_.name.lower(): _ for _ in LogLevel if _ is not LogLevel.Exception
}


class Logger:
	"""Writes entries of at least `level` to `stream`, which is the current
	`sys.stderr` when not given."""

	def __init__(self, level: LogLevel = LogLevel.Info, stream: TextIO | None = None):
		self.level: LogLevel = level
		self.stream: TextIO | None = stream

	def enabled(self, level: LogLevel) -> bool:
		return level.value >= self.level.value

	def write(self, level: LogLevel, text: str, context: dict[str, TLogValue]) -> None:
		if not self.enabled(level):
			return
		stream = self.stream or sys.stderr
		origin = f"{Term.Color(LEVEL_COLORS[level])}{Term.BOLD}[{LogOrigin.get()}]{Term.RESET}"
		details = " ".join(
			f"{Term.BOLD}{k}{Term.NORMAL}={formatValue(v)}" for k, v in context.items()
		)
		stream.write(f"{origin} {text} {details}".rstrip() + "\n")
		stream.flush()


LOGGER: Logger = Logger()


def setLevel(level: LogLevel | str) -> LogLevel:
	"""Sets the level below which entries are dropped, given as a
	`LogLevel` or by one of the `LOG_LEVELS` names."""
	if isinstance(level, str):
		if (found := LOG_LEVELS.get(level.strip().lower())) is None:
			raise ValueError(
				f"Unknown log level '{level}', pick one of: {', '.join(LOG_LEVELS)}"
			)
		level = found
	LOGGER.level = level
	return level


def formatValue(value: Any) -> str:
	if value is None:
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, str) and (not value or " " in value):
		return repr(value)
	else:
		return str(value)


def debug(message: str, *, icon: str | None = None, **context: TLogValue) -> None:
	LOGGER.write(LogLevel.Debug, f"{icon} {message}" if icon else message, context)


def info(message: str, *, icon: str | None = None, **context: TLogValue) -> None:
	LOGGER.write(LogLevel.Info, f"{icon} {message}" if icon else message, context)


def warning(message: str, *, icon: str | None = None, **context: TLogValue) -> None:
	LOGGER.write(LogLevel.Warning, f"{icon} {message}" if icon else message, context)


def error(message: str, code: int | str | None = None, **context: TLogValue) -> None:
	"""Logs a managed error, identified by `code`."""
	LOGGER.write(LogLevel.Error, f"{code}: {message}" if code else message, context)


def event(name: str, value: Any = None, **context: TLogValue) -> None:
	"""Logs something that happened, like a request being received."""
	text = name if value is None else f"{name} {formatValue(value)}"
	LOGGER.write(LogLevel.Info, text, context)


def exception(error: BaseException, message: str | None = None) -> BaseException:
	"""Logs the error with its traceback and returns it, so that it can
	be used as `raise exception(e)`."""
	summary = f"[{error.__class__.__name__}] {error}"
	LOGGER.write(
		LogLevel.Exception, f"{message}: {summary}" if message else summary, {}
	)
	stream = LOGGER.stream or sys.stderr
	stream.write("".join(traceback.format_tb(error.__traceback__)))
	stream.flush()
	return error


LOGGER_LEVEL: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	event: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}


def logged(function: Callable[..., Any]) -> bool:
	"""Tells if entries of the given logging function are currently
	written, to skip building the context of the ones that are not."""
	return LOGGER.enabled(LOGGER_LEVEL.get(function, LogLevel.Exception))


# EOF
