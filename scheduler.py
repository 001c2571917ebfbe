"""
Example entry point.

The project is packaged under `src/schtasker`.
Install locally with `pip install -e .` to make `schtasker` importable.
Set SCHTASKER_DEBUG=1 to see the SCHTASKS command line without running it.
"""

import logging
from datetime import datetime, timedelta

from schtasker import SchTask, TaskCreate, TaskError


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    tasker = SchTask.from_env()

    start = (datetime.now() + timedelta(minutes=1)).time()
    end = (datetime.now() + timedelta(minutes=2)).time()
    try:
        print(tasker.create(TaskCreate(
            taskname="example-task",
            taskrun="notepad.exe",
            schedule="DAILY",
            starttime=start,
            endtime=end,
            terminate=True,
            force=True,
        )))
        for t in tasker.query("example-task", own=True):
            print(f"{t.name}: next run {t.next_run_time} ({t.status})")
    except TaskError as exc:
        print(f"Failed to create task: {exc}")


if __name__ == "__main__":
    main()
