"""Errors that carry a business code, a wrapped cause and a call stack."""

from __future__ import annotations

import os
import sys
import sysconfig
from typing import Any, NamedTuple

from svctemplate.gcode import CODE_NIL, Code

_MAX_STACK_DEPTH = 32


class _Frame(NamedTuple):
    function: str
    filename: str
    lineno: int


def _normalise(path: str) -> str:
    return path.replace("\\", "/")


_THIS_FILE = _normalise(os.path.abspath(__file__))
_STDLIB_ROOTS = tuple(
    {
        _normalise(root)
        for root in (
            sysconfig.get_paths().get("stdlib", ""),
            sysconfig.get_paths().get("platstdlib", ""),
        )
        if root
    }
)


def _callers(skip: int = 0) -> tuple[_Frame, ...]:
    """Record the frames above the caller of the function that calls this one."""
    try:
        frame = sys._getframe(2 + skip)
    except ValueError:
        return ()
    frames: list[_Frame] = []
    while frame is not None and len(frames) < _MAX_STACK_DEPTH:
        frames.append(
            _Frame(frame.f_code.co_name, frame.f_code.co_filename, frame.f_lineno)
        )
        frame = frame.f_back
    return tuple(frames)


def _keep_frame(filename: str) -> bool:
    path = _normalise(filename)
    if "<" in path:
        return False
    if _normalise(os.path.abspath(filename)) == _THIS_FILE:
        return False
    return not any(path.startswith(root) for root in _STDLIB_ROOTS)


def _format_sub_stack(frames: tuple[_Frame, ...]) -> list[str]:
    lines: list[str] = []
    space = "  "
    index = 1
    for frame in frames:
        if not _keep_frame(frame.filename):
            continue
        if index > 9:
            space = " "
        lines.append(
            f"   {index}).{space}{frame.function}\n"
            f"    \t{frame.filename}:{frame.lineno}\n"
        )
        index += 1
    return lines


class GError(Exception):
    """An error with optional code, wrapped error and recorded call stack."""

    def __init__(
        self,
        text: str = "",
        code: Code | None = CODE_NIL,
        error: BaseException | None = None,
        *,
        frames: tuple[_Frame, ...] | None = None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self._code = code
        self._error = error
        self._frames = _callers() if frames is None else frames
        if error is not None:
            self.__cause__ = error

    def __str__(self) -> str:
        message = self.text
        if not message and self._code is not None:
            message = self._code.message
        if self._error is not None:
            if message:
                message += ": "
            message += str(self._error)
        return message

    def __format__(self, spec: str) -> str:
        if spec in ("", "s", "v"):
            return str(self)
        if spec in ("-", "-s", "-v"):
            return self.text if self.text else str(self)
        if spec == "+s":
            return self.stack()
        if spec in ("+", "+v"):
            return str(self) + "\n" + self.stack()
        raise ValueError(f"unsupported format spec for GError: {spec!r}")

    @property
    def code(self) -> Code:
        """The error code, taken from the wrapped error when this level has none."""
        if self._code is None or self._code == CODE_NIL:
            return code(self.next())
        return self._code

    @code.setter
    def code(self, value: Code) -> None:
        self._code = value

    def cause(self) -> BaseException:
        """Return the root cause of this error chain."""
        loop: GError = self
        while True:
            inner = loop._error
            if inner is None:
                return Exception(loop.text)
            if isinstance(inner, GError):
                loop = inner
                continue
            inner_cause = getattr(inner, "cause", None)
            if callable(inner_cause):
                return inner_cause()
            return inner

    def stack(self) -> str:
        """Return every level of the chain with its recorded call stack."""
        parts: list[str] = []
        index = 1
        loop: GError | None = self
        while loop is not None:
            parts.append(f"{index}. {loop:-}\n")
            index += 1
            parts.extend(_format_sub_stack(loop._frames))
            inner = loop._error
            if isinstance(inner, GError):
                loop = inner
            else:
                if inner is not None:
                    parts.append(f"{index}. {inner}\n")
                    index += 1
                loop = None
        return "".join(parts)

    def current(self) -> GError:
        """Return this level alone, without the wrapped error."""
        return GError(self.text, self._code, None, frames=self._frames)

    def next(self) -> BaseException | None:
        """Return the wrapped error, if any."""
        return self._error

    def to_json(self) -> str:
        """Return the error message as a quoted JSON-style string."""
        return '"' + str(self) + '"'


def new(text: str) -> GError:
    """Create an error from text."""
    return GError(text, CODE_NIL, frames=_callers())


def newf(format: str, *args: Any) -> GError:
    """Create an error from a printf-style format."""
    return GError(format % args, CODE_NIL, frames=_callers())


def new_skip(skip: int, text: str) -> GError:
    """Create an error from text, skipping ``skip`` callers in its stack."""
    return GError(text, CODE_NIL, frames=_callers(skip))


def newf_skip(skip: int, format: str, *args: Any) -> GError:
    """Create a formatted error, skipping ``skip`` callers in its stack."""
    return GError(format % args, CODE_NIL, frames=_callers(skip))


def wrap(err: BaseException | None, text: str) -> GError | None:
    """Wrap ``err`` with text, keeping its code; None stays None."""
    if err is None:
        return None
    return GError(text, code(err), err, frames=_callers())


def wrapf(err: BaseException | None, format: str, *args: Any) -> GError | None:
    """Wrap ``err`` with formatted text, keeping its code; None stays None."""
    if err is None:
        return None
    return GError(format % args, code(err), err, frames=_callers())


def wrap_skip(skip: int, err: BaseException | None, text: str) -> GError | None:
    """Wrap ``err`` with text, skipping ``skip`` callers in its stack."""
    if err is None:
        return None
    return GError(text, code(err), err, frames=_callers(skip))


def wrapf_skip(
    skip: int, err: BaseException | None, format: str, *args: Any
) -> GError | None:
    """Wrap ``err`` with formatted text, skipping ``skip`` callers."""
    if err is None:
        return None
    return GError(format % args, code(err), err, frames=_callers(skip))


def new_code(code: Code, *args: str) -> GError:
    """Create an error with a code; texts are joined with ", "."""
    return GError(", ".join(args), code, frames=_callers())


def new_codef(code: Code, format: str, *args: Any) -> GError:
    """Create an error with a code and formatted text."""
    return GError(format % args, code, frames=_callers())


def new_code_skip(code: Code, skip: int, *args: str) -> GError:
    """Create an error with a code, skipping ``skip`` callers."""
    return GError(", ".join(args), code, frames=_callers(skip))


def new_codef_skip(code: Code, skip: int, format: str, *args: Any) -> GError:
    """Create an error with a code and formatted text, skipping callers."""
    return GError(format % args, code, frames=_callers(skip))


def wrap_code(code: Code, err: BaseException | None, *args: str) -> GError | None:
    """Wrap ``err`` with a code and text; None stays None."""
    if err is None:
        return None
    return GError(", ".join(args), code, err, frames=_callers())


def wrap_codef(
    code: Code, err: BaseException | None, format: str, *args: Any
) -> GError | None:
    """Wrap ``err`` with a code and formatted text; None stays None."""
    if err is None:
        return None
    return GError(format % args, code, err, frames=_callers())


def wrap_code_skip(
    code: Code, skip: int, err: BaseException | None, *args: str
) -> GError | None:
    """Wrap ``err`` with a code and text, skipping ``skip`` callers."""
    if err is None:
        return None
    return GError(", ".join(args), code, err, frames=_callers(skip))


def wrap_codef_skip(
    code: Code, skip: int, err: BaseException | None, format: str, *args: Any
) -> GError | None:
    """Wrap ``err`` with a code and formatted text, skipping callers."""
    if err is None:
        return None
    return GError(format % args, code, err, frames=_callers(skip))


def code(err: BaseException | None) -> Code:
    """Return the code of ``err``, or CODE_NIL if it has none."""
    if err is None:
        return CODE_NIL
    if isinstance(err, GError):
        return err.code
    attached = getattr(err, "code", None)
    if isinstance(attached, Code):
        return attached
    return CODE_NIL


def cause(err: BaseException | None) -> BaseException | None:
    """Return the root cause of ``err``."""
    if err is None:
        return None
    err_cause = getattr(err, "cause", None)
    if callable(err_cause):
        return err_cause()
    return err


def stack(err: BaseException | None) -> str:
    """Return the stack of ``err``, or its message if it records none."""
    if err is None:
        return ""
    if isinstance(err, GError):
        return err.stack()
    return str(err)


def current(err: BaseException | None) -> BaseException | None:
    """Return the current level of ``err`` without what it wraps."""
    if err is None:
        return None
    if isinstance(err, GError):
        return err.current()
    return err


def next_error(err: BaseException | None) -> BaseException | None:
    """Return the error wrapped by ``err``, or None."""
    if isinstance(err, GError):
        return err.next()
    return None


def has_stack(err: BaseException | None) -> bool:
    """Return whether ``err`` records a call stack."""
    return isinstance(err, GError)