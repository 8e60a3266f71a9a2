import os
from typing import ClassVar


def hasColor() -> bool:
	"""Colours are used on a terminal, unless `NO_COLOR` is set, and always
	with `FORCE_COLOR`. SEE: https://no-color.org/"""
	if "FORCE_COLOR" in os.environ:
		return True
	return "NO_COLOR" not in os.environ and os.isatty(2)


COLOR: bool = hasColor()


class Term:
	BOLD: ClassVar[str] = "\033[1m" if COLOR else ""
	NORMAL: ClassVar[str] = "\033[22m" if COLOR else ""
	RESET: ClassVar[str] = "\033[0m" if COLOR else ""

	@staticmethod
	def Color(code: int) -> str:
		"""The escape sequence for the given 256-colour palette entry."""
		return f"\033[38;5;{code}m" if COLOR else ""


# EOF
