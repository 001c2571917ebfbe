from __future__ import annotations

from typing import Optional, Sequence

_NOT_FOUND_MARKERS = (
    "cannot find the file specified",
    "does not exist",
)

_ALREADY_EXISTS_MARKERS = (
    "cannot create a file when that file already exists",
    "already exists",
)


class TaskError(Exception):
    def __init__(
        self,
        message: str,
        *,
        returncode: Optional[int] = None,
        args: Sequence[str] = (),
        output: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.cmd = list(args)
        self.output = output


class TaskAlreadyExistsError(TaskError):
    pass


class TaskNotFoundError(TaskError):
    pass


class SchtasksNotAvailableError(TaskError):
    pass


def error_for_output(output: str, returncode: int, args: Sequence[str]) -> TaskError:
    """Pick the TaskError subclass matching what SCHTASKS printed."""
    low = output.lower()
    text = output.strip() or f"exit status {returncode}"
    command = args[0] if args else "SCHTASKS"
    message = f"SCHTASKS {command} failed:\n{text}"

    if any(m in low for m in _ALREADY_EXISTS_MARKERS):
        cls = TaskAlreadyExistsError
    elif any(m in low for m in _NOT_FOUND_MARKERS):
        cls = TaskNotFoundError
    else:
        cls = TaskError
    return cls(message, returncode=returncode, args=args, output=output)
