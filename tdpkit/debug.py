"""Debugging helpers: lazy formatting, logging, assertions and stack dumps.

Debug mode is switched on by setting the ``TDPKIT_DEBUG`` environment
variable to a non-empty value other than ``0``. ``TDPKIT_DEBUG_FILTER``
holds a regular expression that log lines must match to be printed, and
``TDPKIT_DEBUG_NOCAPTURE`` sends log lines to stderr even when a sink has
been installed with :func:`with_testing`.
"""

from __future__ import annotations

import inspect
import io
import os
import re
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, Optional, Sequence, TextIO, TypeVar


def _flag(name: str) -> bool:
    return os.environ.get(name, "") not in ("", "0")


ENABLED: bool = _flag("TDPKIT_DEBUG")
NOCAPTURE: bool = _flag("TDPKIT_DEBUG_NOCAPTURE")
_filter_source = os.environ.get("TDPKIT_DEBUG_FILTER")
FILTER: Optional[re.Pattern[str]] = re.compile(_filter_source) if _filter_source else None

_local = threading.local()

T = TypeVar("T")


class InternalAssertionError(AssertionError):
    """Raised by :func:`assert_that` when an internal invariant is broken."""


class UnsupportedError(Exception):
    """An operation that is not supported was called."""

    def __init__(self, function: str = "") -> None:
        self.function = function
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.function:
            return "tdpkit: unsupported operation"
        return f"tdpkit: {self.function}() is not supported"


@dataclass
class Value(Generic[T]):
    """A value that may only be read while debug mode is enabled."""

    value: Optional[T] = None

    def get(self) -> Optional[T]:
        if not ENABLED:
            raise RuntimeError("called Value.get() when not in debug mode")
        return self.value


class Formatter:
    """Text whose rendering is delayed until it is converted to a string."""

    __slots__ = ("_render",)

    def __init__(self, render: Callable[[TextIO], None]) -> None:
        self._render = render

    def __str__(self) -> str:
        out = io.StringIO()
        self._render(out)
        return out.getvalue()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def __repr__(self) -> str:
        return f"Formatter({str(self)!r})"


def fprintf(fmt: str, *args: Any) -> Formatter:
    """Return a formatter that applies ``fmt % args`` when rendered."""
    return Formatter(lambda out: out.write(fmt % args))


def _qualified_name(f: Any) -> str:
    module = getattr(f, "__module__", None)
    qualname = getattr(f, "__qualname__", None) or getattr(f, "__name__", "")
    if module and qualname:
        return f"{module}.{qualname}"
    return qualname or ""


def describe_func(f: Any) -> Formatter:
    """Pretty-print a function value as ``address:name``."""

    def render(out: TextIO) -> None:
        if callable(f):
            address, name = id(f), _qualified_name(f)
        elif isinstance(f, int):
            address, name = f, ""
        else:
            out.write(f"%v(NONFUNC:{f!r})")
            address, name = 0, ""
        out.write(f"{address:#x}:{name or '<unknown>'}")

    return Formatter(render)


def dict_format(prefix: Any, *args: Any) -> Formatter:
    """Pretty-print alternating keys and values as a dictionary.

    Entries whose value is ``None`` are left out.
    """
    if len(args) % 2:
        raise ValueError("dbg: length must be divisible by 2")
    pairs = list(zip(args[::2], args[1::2]))

    def render(out: TextIO) -> None:
        out.write(f"{'' if prefix is None else prefix}{{")
        out.write(", ".join(f"{k}: {v}" for k, v in pairs if v is not None))
        out.write("}")

    return Formatter(render)


def _module_tail(frame: Any) -> str:
    return inspect.getmodulename(frame.f_code.co_filename) or ""


def stack(skip: int = 1) -> str:
    """Return a readable stack trace.

    ``skip=1`` starts at this function's own frame, ``skip=2`` at its caller.
    """
    frame = inspect.currentframe()
    for _ in range(max(skip - 1, 0)):
        if frame is None:
            break
        frame = frame.f_back

    lines = []
    while frame is not None:
        code = frame.f_code
        module = _module_tail(frame)
        name = f"{module}.{code.co_name}()" if module else f"{code.co_name}()"
        lines.append(
            f"- {name:<24} 0x{id(code):x}+0x{frame.f_lasti:<4x} "
            f"{code.co_filename}:{frame.f_lineno}\n"
        )
        frame = frame.f_back
    return "".join(lines)


def unsupported() -> UnsupportedError:
    """Return an :class:`UnsupportedError` naming the calling function."""
    current = inspect.currentframe()
    caller = current.f_back if current is not None else None
    if caller is None:
        return UnsupportedError()
    module = _module_tail(caller)
    name = caller.f_code.co_name
    return UnsupportedError(f"{module}.{name}" if module else name)


@contextmanager
def with_testing(sink: Callable[[str], Any]) -> Iterator[Callable[[str], Any]]:
    """Send this thread's log lines to ``sink`` for the duration of the block."""
    previous = getattr(_local, "sink", None)
    _local.sink = sink
    try:
        yield sink
    finally:
        _local.sink = previous


def _is_log_helper(name: str) -> bool:
    return name.startswith("log") or name.endswith("_log")


def log(context: Optional[Sequence[Any]], operation: str, fmt: str, *args: Any) -> None:
    """Print a debugging line; does nothing unless debug mode is enabled.

    ``context`` is an optional format string followed by its arguments,
    printed before ``operation``.
    """
    if not ENABLED:
        return

    current = inspect.currentframe()
    frame = current.f_back if current is not None else None
    while frame is not None and _is_log_helper(frame.f_code.co_name):
        frame = frame.f_back

    if frame is None:
        pkg, file, line = "?", "?", 0
    else:
        pkg = _module_tail(frame) or "?"
        file = os.path.basename(frame.f_code.co_filename)
        line = frame.f_lineno

    parts = [f"{pkg}/{file}:{line} [g{threading.get_ident():04d}"]
    if context:
        parts.append(", " + str(context[0]) % tuple(context[1:]))
    parts.append(f"] {operation}: ")
    parts.append(fmt % args)
    message = "".join(parts)

    if FILTER is not None and not FILTER.search(message):
        return

    sink = getattr(_local, "sink", None)
    if not NOCAPTURE and sink is not None:
        sink(message)
        return

    sys.stderr.write(message + "\n")
    sys.stderr.flush()


def assert_that(cond: bool, fmt: str, *args: Any) -> None:
    """Raise :class:`InternalAssertionError` if ``cond`` is false in debug mode."""
    if ENABLED and not cond:
        raise InternalAssertionError("tdpkit: internal assertion failed: " + fmt % args)