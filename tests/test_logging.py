import io
from typing import Iterator

import pytest

from pubserve.utils import logging
from pubserve.utils.logging import (
	LogLevel,
	debug,
	error,
	event,
	exception,
	info,
	logged,
	setLevel,
	warning,
)


@pytest.fixture
def stream() -> Iterator[io.StringIO]:
	"""Captures the log output, restoring the logger afterwards."""
	stream = io.StringIO()
	level, previous = logging.LOGGER.level, logging.LOGGER.stream
	logging.LOGGER.stream = stream
	yield stream
	logging.LOGGER.level, logging.LOGGER.stream = level, previous


def test_entries_below_level_are_dropped(stream: io.StringIO):
	setLevel("warning")
	debug("Hidden")
	info("Hidden too")
	warning("Shown", Path="/a b", Count=2, Ok=True)
	lines = stream.getvalue().splitlines()
	assert len(lines) == 1
	assert "Shown" in lines[0]
	# Values with spaces are quoted
	assert "='/a b'" in lines[0]
	assert "=2" in lines[0]
	assert "=✓" in lines[0]


def test_origin_prefixes_entries(stream: io.StringIO):
	setLevel(LogLevel.Debug)
	event("GET", "/index.html")
	error("Port is taken", "HOSTPORTERR")
	first, second = stream.getvalue().splitlines()
	assert "[pubserve]" in first
	assert first.endswith("GET /index.html")
	assert "HOSTPORTERR: Port is taken" in second


def test_exceptions_are_always_logged(stream: io.StringIO):
	setLevel("error")
	try:
		raise RuntimeError("Boom")
	except RuntimeError as e:
		assert exception(e, "Handler failed") is e
	output = stream.getvalue()
	assert "Handler failed: [RuntimeError] Boom" in output
	assert "test_exceptions_are_always_logged" in output


def test_logged(stream: io.StringIO):
	setLevel("info")
	assert not logged(debug)
	assert logged(info)
	assert logged(event)


def test_unknown_level(stream: io.StringIO):
	with pytest.raises(ValueError, match="pick one of: debug, info, warning, error"):
		setLevel("chatty")


# EOF
