import sys
import time
from enum import Enum
from typing import NamedTuple, Any, TypeAlias
from contextvars import ContextVar
from .term import Term
from ..config import LOG_LEVEL

ERR = sys.stderr

TLogValue: TypeAlias = (
	bool | int | float | str | bytes | list[Any] | tuple[Any, ...] | dict[str, Any] | None
)

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="httpmsg")


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}


class LogEntry(NamedTuple):
	origin: str
	time: float
	level: LogLevel = LogLevel.Info
	message: str | None = None
	context: dict[str, TLogValue] | None = None


def level(name: str | LogLevel) -> LogLevel:
	"""Resolves a level from its name (case-insensitive), falling back
	to `Info` for unknown names."""
	if isinstance(name, LogLevel):
		return name
	for _ in LogLevel:
		if _.name.lower() == name.strip().lower():
			return _
	return LogLevel.Info


# The threshold is read from the configuration once, `setLevel` changes it at runtime.
_threshold: list[LogLevel] = [level(LOG_LEVEL)]


def setLevel(value: str | LogLevel) -> LogLevel:
	_threshold[0] = level(value)
	return _threshold[0]


def getLevel() -> LogLevel:
	return _threshold[0]


def logged(value: LogLevel) -> bool:
	"""Tells if entries of the given level are currently written out. This
	is used to guard against building entries when not necessary."""
	return value.value >= _threshold[0].value


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value or not value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if not logged(entry.level):
		return entry
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	ERR.write(
		f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
	)
	ERR.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	at: float | None = None,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	context: dict[str, TLogValue],
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time() if at is None else at,
		level=level,
		message=message,
		context=context,
	)


def debug(
	message: str,
	*,
	origin: str | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Debug,
			origin=origin,
			context=context,
		)
	)


def info(
	message: str,
	*,
	origin: str | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(
		entry(
			message=message,
			origin=origin,
			context=context,
		)
	)


def warning(
	message: str,
	*,
	origin: str | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Warning,
			origin=origin,
			context=context,
		)
	)


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	if not logged(LogLevel.Exception):
		return exception
	try:
		stream = ERR
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
		stream.flush()
	except Exception:  # nosec: B110
		# Swallow all exceptions so that this function can be called from an exception
		# handler safely, such as when closing a stream.
		pass

	# Return the exception so that this function can be called like:
	#   raise exception(error)
	return exception


# EOF
