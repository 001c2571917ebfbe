from __future__ import annotations

import argparse
import logging
from typing import List

from . import flags
from .core import SchTask, TaskCreate
from .errors import TaskError


def _split_list(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _add_task_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", required=True, help="Task name (/TN)")
    p.add_argument("--run", default="", help="Program to run (/TR). Defaults to this program")
    p.add_argument("--args", nargs=argparse.REMAINDER, help="Arguments passed to the program")
    p.add_argument("--user", default="", help="Run as user (/RU)")
    p.add_argument("--password", default="", help="Run as password (/RP)")
    p.add_argument("--schedule", type=str.upper, choices=flags.SCHEDULES, default="")
    p.add_argument("--modifier", default="", help="Schedule modifier (/MO)")
    p.add_argument("--days", type=_split_list, default=[], help="Comma separated, e.g. MON,FRI")
    p.add_argument("--months", type=_split_list, default=[], help="Comma separated, e.g. JAN,JUL")
    p.add_argument("--idletime", default="", help="Idle minutes for ONIDLE (/I)")
    p.add_argument("--start-time", default="", help="HH:mm (/ST)")
    p.add_argument("--interval", default="", help="Repetition minutes (/RI)")
    p.add_argument("--end-time", default="", help="HH:mm (/ET)")
    p.add_argument("--duration", default="", help="HH:mm (/DU)")
    p.add_argument("--terminate", action="store_true", help="Kill at end time (/K)")
    p.add_argument("--start-date", default="", help="mm/dd/yyyy (/SD)")
    p.add_argument("--end-date", default="", help="mm/dd/yyyy (/ED)")
    p.add_argument("--channel", default="", help="Event channel for ONEVENT (/EC)")
    p.add_argument("--no-password", action="store_true", help="/NP")
    p.add_argument("--mark-delete", action="store_true", help="Delete after final run (/Z)")
    p.add_argument("--force", action="store_true", help="/F")
    p.add_argument("--level", type=str.upper, choices=flags.LEVELS, default="")
    p.add_argument("--delay", default="", help="mmmm:ss (/DELAY)")


def _task_create(args: argparse.Namespace) -> TaskCreate:
    return TaskCreate(
        username=args.user,
        password=args.password,
        taskname=args.name,
        taskrun=args.run,
        arguments=args.args or [],
        schedule=args.schedule,
        modifier=args.modifier,
        days=args.days,
        months=args.months,
        idletime=args.idletime,
        starttime=args.start_time,
        interval=args.interval,
        endtime=args.end_time,
        duration=args.duration,
        terminate=args.terminate,
        startdate=args.start_date,
        enddate=args.end_date,
        channel_name=args.channel,
        no_password=args.no_password,
        mark_delete=args.mark_delete,
        force=args.force,
        level=args.level,
        delaytime=args.delay,
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="schtasker", description="Manage Windows scheduled tasks through SCHTASKS")
    p.add_argument("-v", "--verbose", action="count", default=0)
    p.add_argument("--bin", default=None, help="SCHTASKS executable (env SCHTASKER_BIN)")
    p.add_argument("--prefix", default=None, help="Own-prefix for task names (env SCHTASKER_PREFIX)")
    p.add_argument("--compat", action="store_const", const=True, default=None, help="Query with headers")
    p.add_argument("--debug", action="store_const", const=True, default=None, help="Log commands without running them")

    sub = p.add_subparsers(dest="cmd", required=True)

    create = sub.add_parser("create", help="Create a new scheduled task")
    _add_task_options(create)

    change = sub.add_parser("change", help="Change an existing task")
    _add_task_options(change)
    change.add_argument("--no-own", action="store_true", help="Do not prefix the task name")

    dele = sub.add_parser("delete", help="Delete a task")
    dele.add_argument("--name", required=True)
    dele.add_argument("--force", action="store_true")
    dele.add_argument("--no-own", action="store_true")

    query = sub.add_parser("query", help="List tasks")
    query.add_argument("--name", default="*", help="Substring to match, '*' for all")
    query.add_argument("--own", action="store_true", help="Only tasks carrying the own-prefix")

    for cmd, text in (("run", "Run a task now"), ("end", "Stop a running task"),
                      ("showsid", "Show the SID of the task's user"), ("exists", "Check if a task exists")):
        sp = sub.add_parser(cmd, help=text)
        sp.add_argument("--name", required=True)
        sp.add_argument("--no-own", action="store_true")

    hlp = sub.add_parser("help", help="Show SCHTASKS help for a sub-command")
    hlp.add_argument("command", nargs="?", default="create",
                     choices=[c.lstrip("/").lower() for c in flags.COMMANDS])

    return p


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    tasker = SchTask.from_env(
        bin=args.bin, prefix=args.prefix, compatibility=args.compat, debug=args.debug
    )

    # debug mode reports the command line through the INFO log
    if args.verbose or tasker.debug:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="[%(levelname)s] %(message)s",
            force=True,
        )
    own = not getattr(args, "no_own", False)

    try:
        if args.cmd == "create":
            print(tasker.create(_task_create(args)))
            return 0

        if args.cmd == "change":
            print(tasker.change(_task_create(args), own))
            return 0

        if args.cmd == "delete":
            print(tasker.delete(args.name, own, args.force))
            return 0

        if args.cmd == "query":
            for t in tasker.query(args.name, args.own):
                print(f"{t.name}\t{t.next_run_time}\t{t.status}")
            return 0

        if args.cmd == "run":
            print(tasker.run(args.name, own))
            return 0

        if args.cmd == "end":
            print(tasker.end(args.name, own))
            return 0

        if args.cmd == "showsid":
            print(tasker.show_sid(args.name, own))
            return 0

        if args.cmd == "exists":
            exists_b = tasker.exists(args.name, own)
            print("yes" if exists_b else "no")
            return 0 if exists_b else 1

        if args.cmd == "help":
            print(tasker.show_help("/" + args.command.upper()))
            return 0

    except (TaskError, ValueError) as e:
        print(str(e))
        return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
