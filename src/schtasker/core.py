from __future__ import annotations

import csv
import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import date, time
from pathlib import Path
from typing import List, Literal, Sequence, Union

from . import flags
from .errors import SchtasksNotAvailableError, error_for_output

logger = logging.getLogger(__name__)

DEBUG_MESSAGE = "You are currently in debug mode."
DEFAULT_PREFIX = "py-wintask-"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def _to_time_str(value: Union[str, time, None]) -> str:
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value or ""


def _to_date_str(value: Union[str, date, None]) -> str:
    # SCHTASKS expects mm/dd/yyyy
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    return value or ""


def _join_list(values: Union[str, Sequence[Union[str, int]]]) -> str:
    # a bare string is a single value, not a list of characters
    if isinstance(values, str):
        return values
    return ",".join(str(v) for v in values)


def _current_program() -> str:
    return str(Path(sys.argv[0]).resolve())


def _quote_arg(value: str) -> str:
    if " " in value:
        return f'"{value}"'
    return value


def _mask(args: Sequence[str]) -> List[str]:
    masked = list(args)
    for i, a in enumerate(masked[:-1]):
        if a == flags.PASSWORD:
            masked[i + 1] = "****"
    return masked


@dataclass
class Task:
    """One row of ``SCHTASKS /QUERY /FO CSV`` output."""

    name: str
    next_run_time: str
    status: str


@dataclass
class TaskCreate:
    """
    Options for ``SCHTASKS /CREATE`` and ``SCHTASKS /CHANGE``.

    Every field is optional; empty values emit no flag.

    Parameters
    - username: /RU "run as" account. "SYSTEM" for the system account.
    - password: /RP password for the "run as" account. "*" prompts.
    - taskname: /TN name in the form path\\name.
    - taskrun: /TR program to run. Defaults to the running program.
    - arguments: Arguments appended to the program in /TR.
    - schedule: /SC frequency, one of flags.SCHEDULES.
    - modifier: /MO refinement of the schedule (e.g. "5", "FIRST", "LASTDAY").
    - days: /D days of week (MON..SUN) or of month (1-31). "*" for all.
    - months: /M months (JAN..DEC). "*" for all.
    - idletime: /I idle minutes before an ONIDLE task runs (1-999).
    - starttime: /ST start time, HH:mm or datetime.time.
    - interval: /RI repetition interval in minutes.
    - endtime: /ET end time, HH:mm or datetime.time.
    - duration: /DU duration, HH:mm.
    - terminate: /K kill the task at endtime or after duration.
    - startdate: /SD first date, mm/dd/yyyy or datetime.date.
    - enddate: /ED last date, mm/dd/yyyy or datetime.date.
    - channel_name: /EC event channel for ONEVENT triggers.
    - no_password: /NP store no password, run non-interactively.
    - mark_delete: /Z delete the task after its final run (sent with /V1).
    - force: /F overwrite an existing task without warning.
    - level: /RL run level, LIMITED or HIGHEST.
    - delaytime: /DELAY wait after the trigger fires, mmmm:ss.
    """

    username: str = ""
    password: str = ""
    taskname: str = ""
    taskrun: str = ""
    arguments: Sequence[str] = field(default_factory=list)
    schedule: Union[flags.Schedule, Literal[""]] = ""
    modifier: str = ""
    days: Union[str, Sequence[Union[str, int]]] = field(default_factory=list)
    months: Union[str, Sequence[str]] = field(default_factory=list)
    idletime: str = ""
    starttime: Union[str, time] = ""
    interval: str = ""
    endtime: Union[str, time] = ""
    duration: str = ""
    terminate: bool = False
    startdate: Union[str, date] = ""
    enddate: Union[str, date] = ""
    channel_name: str = ""
    no_password: bool = False
    mark_delete: bool = False
    force: bool = False
    level: Union[flags.Level, Literal[""]] = ""
    delaytime: str = ""

    def _build_taskrun(self) -> str:
        run = self.taskrun or _current_program()
        args = " ".join(_quote_arg(str(a)) for a in self.arguments)
        return f'"{run}" {args}'.strip()


@dataclass
class SchTask:
    """
    Builds SCHTASKS argument vectors and runs them one process at a time.

    - bin: Executable to invoke.
    - prefix: Prepended to task names when an operation is called with own=True.
    - compatibility: Query with headers and skip them while parsing, for
      SCHTASKS builds that reject /NH with /FO CSV.
    - debug: Log the argument vector instead of running mutating commands.
    """

    bin: str = flags.BIN
    prefix: str = DEFAULT_PREFIX
    compatibility: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "SchTask":
        values = {
            "bin": os.environ.get("SCHTASKER_BIN") or flags.BIN,
            "prefix": os.environ.get("SCHTASKER_PREFIX", DEFAULT_PREFIX),
            "compatibility": _env_flag("SCHTASKER_COMPAT"),
            "debug": _env_flag("SCHTASKER_DEBUG"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def _name(self, taskname: str, own: bool) -> str:
        return self.prefix + taskname if own else taskname

    def _exec(self, args: Sequence[str]) -> str:
        logger.debug("Running %s %s", self.bin, " ".join(_mask(args)))
        try:
            res = subprocess.run(
                [self.bin, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise SchtasksNotAvailableError(
                f"Cannot launch '{self.bin}': {e}", args=args
            ) from e
        output = res.stdout or ""
        if res.returncode != 0:
            logger.error("%s %s exited with %d", self.bin, args[0], res.returncode)
            raise error_for_output(output, res.returncode, args)
        return output

    def _perform(self, args: Sequence[str]) -> str:
        if self.debug:
            logger.info("Commands: %s", _mask(args))
            return DEBUG_MESSAGE
        return self._exec(args)

    def task_make(self, task_create: TaskCreate, command: str, own: bool) -> List[str]:
        tc = task_create
        cmds: List[str] = [command]

        def opt(flag: str, value: str) -> None:
            if value:
                cmds.extend([flag, value])

        opt(flags.USERNAME, tc.username)
        opt(flags.PASSWORD, tc.password)
        opt(flags.SCHEDULE, tc.schedule)
        opt(flags.MODIFIER, tc.modifier)
        opt(flags.DAYS, _join_list(tc.days))
        opt(flags.MONTHS, _join_list(tc.months))
        opt(flags.IDLETIME, tc.idletime)
        opt(flags.STARTTIME, _to_time_str(tc.starttime))
        opt(flags.INTERVAL, tc.interval)
        opt(flags.ENDTIME, _to_time_str(tc.endtime))
        opt(flags.DURATION, tc.duration)
        if tc.terminate:
            cmds.append(flags.TERMINATE)
        opt(flags.STARTDATE, _to_date_str(tc.startdate))
        opt(flags.ENDDATE, _to_date_str(tc.enddate))
        opt(flags.CHANNEL_NAME, tc.channel_name)
        if tc.no_password:
            cmds.append(flags.NO_PASSWORD)
        if tc.force:
            cmds.append(flags.FORCE)
        opt(flags.LEVEL, tc.level)
        opt(flags.DELAYTIME, tc.delaytime)

        cmds.extend([flags.TASKNAME, self._name(tc.taskname, own)])
        cmds.extend([flags.TASKRUN, tc._build_taskrun()])

        # /Z is only honoured for v1 tasks
        if tc.mark_delete:
            cmds.extend([flags.PRE_VISTA, flags.MARK_DELETE])

        logger.debug("Built %s", _mask(cmds))
        return cmds

    def create(self, task_create: TaskCreate) -> str:
        """Create a scheduled task. The name is always own-prefixed."""
        return self._perform(self.task_make(task_create, flags.CREATE, True))

    def delete(self, taskname: str, own: bool = True, force: bool = False) -> str:
        args = [flags.DELETE, flags.TASKNAME, self._name(taskname, own)]
        if force:
            args.append(flags.FORCE)
        return self._perform(args)

    def query(self, name: str = "*", own: bool = False) -> List[Task]:
        """
        List scheduled tasks whose name contains ``name`` (case-insensitive).

        ``"*"`` or ``""`` matches everything. With own=True only tasks
        carrying this instance's prefix are considered.
        """
        args = [flags.QUERY, flags.FORMAT, flags.FORMAT_CSV]
        if not self.compatibility:
            args.append(flags.NO_HEADER)
        output = self._exec(args)

        if own:
            name = self.prefix + ("" if name == "*" else name)
        needle = name.lower()

        tasks: List[Task] = []
        for row in csv.reader(output.splitlines()):
            if len(row) < 3:
                continue
            tname = row[0].strip()
            if self.compatibility and tname.startswith("TaskName"):
                continue
            if name in ("*", "") or needle in tname.lower():
                tasks.append(Task(tname, row[1].strip(), row[2].strip()))
        logger.debug("Query matched %d task(s) for %r", len(tasks), name)
        return tasks

    def exists(self, taskname: str, own: bool = True) -> bool:
        target = self._name(taskname, own).lstrip("\\").lower()
        for t in self.query(taskname, own):
            full = t.name.lstrip("\\").lower()
            if target in (full, full.rsplit("\\", 1)[-1]):
                return True
        return False

    def change(self, task_create: TaskCreate, own: bool = True) -> str:
        return self._perform(self.task_make(task_create, flags.CHANGE, own))

    def run(self, taskname: str, own: bool = True) -> str:
        """Run a scheduled task now."""
        return self._perform(
            [flags.RUN, flags.TASKNAME, self._name(taskname, own), flags.IMMEDIATE]
        )

    def end(self, taskname: str, own: bool = True) -> str:
        """Stop a running scheduled task."""
        return self._perform([flags.END, flags.TASKNAME, self._name(taskname, own)])

    def show_sid(self, taskname: str, own: bool = True) -> str:
        """Show the SID of the task's dedicated user."""
        return self._perform(
            [flags.SHOWSID, flags.TASKNAME, "\\" + self._name(taskname, own)]
        )

    def show_help(self, command: str = flags.CREATE) -> str:
        return self._exec([command, flags.HELP])
