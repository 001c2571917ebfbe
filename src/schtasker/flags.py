"""Flags and value sets accepted by SCHTASKS.exe."""

from __future__ import annotations

from typing import Literal, Tuple

BIN = "SCHTASKS"

# Sub-commands
CREATE = "/CREATE"
DELETE = "/DELETE"
QUERY = "/QUERY"
CHANGE = "/CHANGE"
RUN = "/RUN"
END = "/END"
SHOWSID = "/SHOWSID"

COMMANDS: Tuple[str, ...] = (CREATE, DELETE, QUERY, CHANGE, RUN, END, SHOWSID)

# /CREATE and /CHANGE
USERNAME = "/RU"
PASSWORD = "/RP"
SCHEDULE = "/SC"
MODIFIER = "/MO"
DAYS = "/D"
MONTHS = "/M"
IDLETIME = "/I"
TASKNAME = "/TN"
TASKRUN = "/TR"
STARTTIME = "/ST"
INTERVAL = "/RI"
ENDTIME = "/ET"
DURATION = "/DU"
TERMINATE = "/K"
STARTDATE = "/SD"
ENDDATE = "/ED"
CHANNEL_NAME = "/EC"
NO_PASSWORD = "/NP"
MARK_DELETE = "/Z"
PRE_VISTA = "/V1"
FORCE = "/F"
LEVEL = "/RL"
DELAYTIME = "/DELAY"

# /QUERY
FORMAT = "/FO"
FORMAT_CSV = "CSV"
FORMAT_LIST = "LIST"
FORMAT_TABLE = "TABLE"
NO_HEADER = "/NH"

# /RUN
IMMEDIATE = "/I"

HELP = "/?"

Schedule = Literal[
    "MINUTE", "HOURLY", "DAILY", "WEEKLY", "MONTHLY",
    "ONCE", "ONSTART", "ONLOGON", "ONIDLE", "ONEVENT",
]
SCHEDULES: Tuple[str, ...] = (
    "MINUTE", "HOURLY", "DAILY", "WEEKLY", "MONTHLY",
    "ONCE", "ONSTART", "ONLOGON", "ONIDLE", "ONEVENT",
)

ALL = "*"

DAYS_OF_WEEK: Tuple[str, ...] = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN", ALL)
MONTHS_OF_YEAR: Tuple[str, ...] = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC", ALL,
)

Level = Literal["LIMITED", "HIGHEST"]
LEVELS: Tuple[str, ...] = ("LIMITED", "HIGHEST")
