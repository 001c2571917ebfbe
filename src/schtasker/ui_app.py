from __future__ import annotations

from typing import List

import pandas as pd
import streamlit as st

from schtasker import flags
from schtasker.core import SchTask, Task, TaskCreate


st.set_page_config(page_title="Scheduled Tasks", layout="wide")
st.title("Windows Task Scheduler : SCHTASKS UI")
st.caption("Browse, run and stop scheduled tasks")

tasker = SchTask.from_env()


@st.cache_data(ttl=5)
def load_tasks(name: str, own: bool) -> List[Task]:
    return tasker.query(name or "*", own)


def get_tasks(name: str, own: bool) -> List[Task]:
    """Return the cached task snapshot, reloading when the filter changes or it was invalidated."""
    ss = st.session_state
    key = (name, own)
    if (
        ss.get("tasks_snapshot") is None
        or ss.get("tasks_filter") != key
        or ss.get("invalidate_tasks") is True
    ):
        load_tasks.clear()
        ss["tasks_snapshot"] = load_tasks(name, own)
        ss["tasks_filter"] = key
        ss["invalidate_tasks"] = False
    return ss["tasks_snapshot"]


def _require_selection(action: str) -> str | None:
    if not st.session_state.get("selected_task"):
        st.warning(f"Select a task in the table to {action}.")
        return None
    return st.session_state["selected_task"]


def _action(label: str, icon: str, verb: str, fn) -> None:
    if st.button(label, use_container_width=True, icon=icon):
        name = _require_selection(verb)
        if name:
            try:
                out = fn(name, False)
                st.success(out.strip() or f"{label} '{name}'")
                st.session_state["invalidate_tasks"] = True
            except Exception as e:
                st.error(str(e))


col1, col2, col3, col4, col5, col6, col7 = st.columns([1, 2, 1.4, 1.2, 1.2, 1.2, 1.2])
with col1:
    if st.button("Refresh", type="primary"):
        st.session_state["invalidate_tasks"] = True
with col2:
    name_filter = st.text_input("Name contains", value="", label_visibility="collapsed", placeholder="Name contains")
with col3:
    only_own = st.checkbox(f"Only '{tasker.prefix}' tasks", value=True)
with col4:
    _action("Run", "▶️", "run", tasker.run)
with col5:
    _action("End", "⏹️", "stop", tasker.end)
with col6:
    if st.button("Delete", use_container_width=True, icon="🗑️"):
        name = _require_selection("delete")
        if name:
            st.session_state["confirm_delete_name"] = name
with col7:
    if st.button("Add", use_container_width=True, icon="➕"):
        st.session_state["show_add_form"] = True


def _render_add_form_body() -> None:
    name = st.text_input("Name", placeholder="my-task")
    st.caption(f"Created as '{tasker.prefix}{name}'")
    run = st.text_input("Program (required)", value="", placeholder=r"C:\\Windows\\System32\\notepad.exe")
    args_txt = st.text_input("Args (optional)", value="", placeholder="--foo 123 --bar")
    schedule = st.selectbox("Schedule", options=flags.SCHEDULES, index=flags.SCHEDULES.index("DAILY"))
    modifier = st.text_input("Modifier (optional)", value="")
    start_time = st.time_input("Start time")
    days: List[str] = []
    months: List[str] = []
    if schedule == "WEEKLY":
        days = st.multiselect("Days", options=flags.DAYS_OF_WEEK)
    elif schedule == "MONTHLY":
        months = st.multiselect("Months", options=flags.MONTHS_OF_YEAR)

    colu1, colu2 = st.columns(2)
    with colu1:
        user = st.text_input("Run as user (optional)", value="")
    with colu2:
        password = st.text_input("Password (optional)", type="password", value="")
    level = st.selectbox("Run level", options=flags.LEVELS, index=0)
    force = st.checkbox("Overwrite if exists", value=False)

    col_ok, col_cancel = st.columns([1, 1])
    with col_ok:
        create_clicked = st.button("Create", type="primary", use_container_width=True)
    with col_cancel:
        cancel_clicked = st.button("Cancel", use_container_width=True)

    if cancel_clicked:
        st.session_state["show_add_form"] = False
        st.rerun()

    if create_clicked:
        if not name or not run:
            st.error("Name and Program are required.")
            return
        import shlex as _shlex
        try:
            args_list = _shlex.split(args_txt) if args_txt.strip() else []
        except ValueError as e:
            st.error(f"Cannot parse args: {e}")
            return
        try:
            out = tasker.create(
                TaskCreate(
                    taskname=name,
                    taskrun=run,
                    arguments=args_list,
                    schedule=schedule,
                    modifier=modifier,
                    starttime=start_time,
                    days=days,
                    months=months,
                    username=user,
                    password=password,
                    level=level,
                    force=force,
                )
            )
            st.success(out.strip() or f"Task '{name}' created")
            st.session_state["show_add_form"] = False
            st.session_state["invalidate_tasks"] = True
            st.rerun()
        except Exception as e:
            st.error(str(e))


@st.dialog("Add Scheduled Task", width="large")
def _add_task_dialog():  # pragma: no cover
    _render_add_form_body()


@st.dialog("Confirm Delete")
def _confirm_delete_dialog():  # pragma: no cover
    name = st.session_state.get("confirm_delete_name")
    if not name:
        return
    st.warning(f"Delete task '{name}'? This cannot be undone.")
    col_yes, col_no = st.columns(2)
    with col_yes:
        if st.button("Yes, delete", type="primary", use_container_width=True, icon="🗑️"):
            try:
                tasker.delete(name, own=False, force=True)
                st.success(f"Deleted '{name}'")
                st.session_state["confirm_delete_name"] = None
                st.session_state["selected_task"] = None
                st.session_state["invalidate_tasks"] = True
                st.rerun()
            except Exception as e:
                st.error(str(e))
    with col_no:
        if st.button("Cancel", use_container_width=True):
            st.session_state["confirm_delete_name"] = None
            st.rerun()


try:
    tasks = get_tasks(name_filter.strip(), only_own)
except Exception as e:
    st.error(str(e))
    st.stop()

if not tasks:
    st.info("No tasks found or access denied.")
else:
    df = pd.DataFrame(
        [{"Name": t.name, "Next Run Time": t.next_run_time, "Status": t.status} for t in tasks]
    )
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        selection_mode="single-row",
        key="df_with_selection",
        on_select="rerun",
    )

    # SCHTASKS wants names without the leading folder separator
    new_selected: str | None = None
    sel_state = st.session_state.get("df_with_selection")
    rows_sel = getattr(getattr(sel_state, "selection", None), "rows", None)
    if rows_sel:
        idx = rows_sel[0]
        if 0 <= idx < len(df):
            new_selected = str(df.iloc[idx]["Name"]).strip().lstrip("\\")
    st.session_state["selected_task"] = new_selected

    if new_selected:
        st.subheader(f"Details: {new_selected}")
        with st.container(border=True):
            st.markdown("**Security identifier**")
            if st.button("Show SID"):
                try:
                    st.code(tasker.show_sid(new_selected, own=False))
                except Exception as e:
                    st.error(str(e))

if st.session_state.get("show_add_form"):
    _add_task_dialog()

if st.session_state.get("confirm_delete_name"):
    _confirm_delete_dialog()
