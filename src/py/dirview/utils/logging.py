import os
import sys
from enum import Enum
from typing import Any, ClassVar
from contextvars import ContextVar

# SEE: https://no-color.org/
NO_COLOR: bool = "NO_COLOR" in os.environ
FORCE_COLOR: bool = "FORCE_COLOR" in os.environ
COLOR: bool = FORCE_COLOR or NO_COLOR is False

# Debug lines (such as 404s) are only written with DIRVIEW_DEBUG=1
LOG_DEBUG: bool = os.environ.get("DIRVIEW_DEBUG", "0") == "1"

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="dirview")

TContext = str | int | float | bool | None


class Term:
	BOLD: ClassVar[str] = "" if NO_COLOR else "\033[1m"
	RESET: ClassVar[str] = "" if NO_COLOR else "\033[0m"

	@staticmethod
	def Color(color: int) -> str:
		return f"\033[0;38;5;{color}m" if COLOR else ""


class LogLevel(Enum):
	Debug = 31
	Info = 75
	Warning = 202
	Error = 160
	Event = 81

	@property
	def color(self) -> str:
		return Term.Color(self.value)


def formatData(value: Any) -> str:
	if value is None or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def write(
	level: LogLevel,
	label: str,
	message: str,
	context: dict[str, TContext],
	*,
	origin: str | None = None,
) -> None:
	"""Writes a single colored line on stderr, like
	`[dirview] message Key=value`."""
	if level is LogLevel.Debug and not LOG_DEBUG:
		return None
	stream = sys.stderr
	stream.write(
		f"{level.color}{Term.BOLD}[{origin or LogOrigin.get()}]{label}{Term.RESET} {message} {formatData(context)}{Term.RESET}\n"
	)
	stream.flush()


def debug(message: str, *, origin: str | None = None, **context: TContext) -> None:
	write(LogLevel.Debug, "", message, context, origin=origin)


def info(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	**context: TContext,
) -> None:
	write(LogLevel.Info, f" {icon}" if icon else "", message, context, origin=origin)


def warning(message: str, *, origin: str | None = None, **context: TContext) -> None:
	write(LogLevel.Warning, "", message, context, origin=origin)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	**context: TContext,
) -> None:
	write(
		LogLevel.Error,
		f" {code}" if code is not None else "",
		message,
		context,
		origin=origin,
	)


def event(
	event: str, value: Any = None, *, origin: str | None = None, **context: TContext
) -> None:
	"""Logs a named event, such as a request method along with its path."""
	write(LogLevel.Event, f" {event}", formatData(value), context, origin=origin)


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	try:
		stream = sys.stderr
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		# Filesystem failures carry the original OSError
		if exception.__cause__:
			stream.write(
				f"... caused by [{exception.__cause__.__class__.__name__}] {exception.__cause__}\n"
			)
		stream.flush()
	except Exception:  # nosec: B110
		# Swallow all exceptions so that this function can be called from an exception
		# handler safely.
		pass

	# Return the exception so that this function can be called like:
	#   raise exception(e)
	return exception


# EOF
