import subprocess
import unittest
from unittest import mock

from schtasker import (
    DEBUG_MESSAGE,
    SchTask,
    SchtasksNotAvailableError,
    Task,
    TaskAlreadyExistsError,
    TaskCreate,
    TaskError,
    TaskNotFoundError,
)

QUERY_NH = (
    '"\\py-wintask-Test","10/18/2026 14:00:00","Ready"\r\n'
    '"\\Other Task","N/A","Disabled"\r\n'
    '\r\n'
    '"\\Microsoft\\Windows\\Defrag\\ScheduledDefrag","N/A","Ready"\r\n'
)

QUERY_COMPAT = (
    '"TaskName","Next Run Time","Status"\r\n'
    '"\\py-wintask-Test","10/18/2026 14:00:00","Running"\r\n'
    '\r\n'
    'Folder: \\Microsoft\r\n'
    '"TaskName","Next Run Time","Status"\r\n'
    '"\\Microsoft\\py-wintask-Sub","N/A","Ready"\r\n'
)


def _completed(output: str = "SUCCESS", returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=output)


class _RunPatch(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch("schtasker.core.subprocess.run", return_value=_completed())
        self.run_mock = patcher.start()
        self.addCleanup(patcher.stop)
        self.tasker = SchTask(prefix="py-wintask-")

    def argv(self):
        return self.run_mock.call_args[0][0]


class TestCommands(_RunPatch):
    def test_create_always_prefixes(self) -> None:
        out = self.tasker.create(TaskCreate(taskname="Test", taskrun="notepad.exe", schedule="DAILY"))
        self.assertEqual(out, "SUCCESS")
        self.assertEqual(
            self.argv(),
            ["SCHTASKS", "/CREATE", "/SC", "DAILY", "/TN", "py-wintask-Test", "/TR", '"notepad.exe"'],
        )
        kwargs = self.run_mock.call_args[1]
        self.assertIs(kwargs["stderr"], subprocess.STDOUT)
        self.assertFalse(kwargs["check"])

    def test_child_gets_no_stdin_and_lossy_text(self) -> None:
        """
        SCHTASKS (Y/N) prompts must read EOF instead of the caller's stdin,
        and undecodable output bytes must not raise.
        """
        self.tasker.delete("Test", own=False, force=False)
        kwargs = self.run_mock.call_args[1]
        self.assertIs(kwargs["stdin"], subprocess.DEVNULL)
        self.assertIs(kwargs["stdout"], subprocess.PIPE)
        self.assertTrue(kwargs["text"])
        self.assertEqual(kwargs["errors"], "replace")

    def test_delete(self) -> None:
        self.tasker.delete("Test", own=True, force=False)
        self.assertEqual(self.argv(), ["SCHTASKS", "/DELETE", "/TN", "py-wintask-Test"])
        self.tasker.delete("Test", own=False, force=True)
        self.assertEqual(self.argv(), ["SCHTASKS", "/DELETE", "/TN", "Test", "/F"])

    def test_change(self) -> None:
        self.tasker.change(TaskCreate(taskname="Test", taskrun="x", starttime="10:00"), own=False)
        self.assertEqual(self.argv(), ["SCHTASKS", "/CHANGE", "/ST", "10:00", "/TN", "Test", "/TR", '"x"'])

    def test_run(self) -> None:
        self.tasker.run("Test", own=True)
        self.assertEqual(self.argv(), ["SCHTASKS", "/RUN", "/TN", "py-wintask-Test", "/I"])

    def test_end(self) -> None:
        self.tasker.end("Test", own=False)
        self.assertEqual(self.argv(), ["SCHTASKS", "/END", "/TN", "Test"])

    def test_show_sid_adds_backslash(self) -> None:
        self.tasker.show_sid("Test", own=True)
        self.assertEqual(self.argv(), ["SCHTASKS", "/SHOWSID", "/TN", "\\py-wintask-Test"])

    def test_show_help(self) -> None:
        self.tasker.show_help("/CREATE")
        self.assertEqual(self.argv(), ["SCHTASKS", "/CREATE", "/?"])

    def test_custom_binary(self) -> None:
        SchTask(bin=r"C:\Windows\System32\schtasks.exe").end("x", own=False)
        self.assertEqual(self.argv()[0], r"C:\Windows\System32\schtasks.exe")


class TestDebugMode(_RunPatch):
    def test_mutating_commands_do_not_run(self) -> None:
        tasker = SchTask(debug=True)
        results = [
            tasker.create(TaskCreate(taskname="t", taskrun="x")),
            tasker.delete("t"),
            tasker.change(TaskCreate(taskname="t", taskrun="x")),
            tasker.run("t"),
            tasker.end("t"),
            tasker.show_sid("t"),
        ]
        self.assertEqual(results, [DEBUG_MESSAGE] * 6)
        self.run_mock.assert_not_called()

    def test_query_and_help_still_run(self) -> None:
        tasker = SchTask(debug=True)
        tasker.show_help()
        self.run_mock.return_value = _completed(QUERY_NH)
        tasker.query()
        self.assertEqual(self.run_mock.call_count, 2)

    def test_password_is_masked_in_logs(self) -> None:
        tasker = SchTask(debug=True)
        with self.assertLogs("schtasker.core", level="INFO") as logs:
            tasker.create(TaskCreate(taskname="t", taskrun="x", username="u", password="hunter2"))
        self.assertNotIn("hunter2", "\n".join(logs.output))
        self.assertIn("****", "\n".join(logs.output))


class TestQuery(_RunPatch):
    def test_no_header_flag(self) -> None:
        self.run_mock.return_value = _completed(QUERY_NH)
        self.tasker.query()
        self.assertEqual(self.argv(), ["SCHTASKS", "/QUERY", "/FO", "CSV", "/NH"])

    def test_all_rows_parsed_and_blank_lines_skipped(self) -> None:
        self.run_mock.return_value = _completed(QUERY_NH)
        tasks = self.tasker.query("*", own=False)
        self.assertEqual(
            tasks,
            [
                Task("\\py-wintask-Test", "10/18/2026 14:00:00", "Ready"),
                Task("\\Other Task", "N/A", "Disabled"),
                Task("\\Microsoft\\Windows\\Defrag\\ScheduledDefrag", "N/A", "Ready"),
            ],
        )

    def test_filter_is_case_insensitive_substring(self) -> None:
        self.run_mock.return_value = _completed(QUERY_NH)
        names = [t.name for t in self.tasker.query("DEFRAG", own=False)]
        self.assertEqual(names, ["\\Microsoft\\Windows\\Defrag\\ScheduledDefrag"])

    def test_own_star_matches_prefix(self) -> None:
        self.run_mock.return_value = _completed(QUERY_NH)
        names = [t.name for t in self.tasker.query("*", own=True)]
        self.assertEqual(names, ["\\py-wintask-Test"])

    def test_own_with_name(self) -> None:
        self.run_mock.return_value = _completed(QUERY_NH)
        self.assertEqual(len(self.tasker.query("test", own=True)), 1)
        self.assertEqual(self.tasker.query("other", own=True), [])

    def test_compatibility_skips_headers(self) -> None:
        self.run_mock.return_value = _completed(QUERY_COMPAT)
        tasker = SchTask(compatibility=True)
        tasks = tasker.query("", own=False)
        self.assertEqual(self.argv(), ["SCHTASKS", "/QUERY", "/FO", "CSV"])
        self.assertEqual(
            tasks,
            [
                Task("\\py-wintask-Test", "10/18/2026 14:00:00", "Running"),
                Task("\\Microsoft\\py-wintask-Sub", "N/A", "Ready"),
            ],
        )

    def test_info_message_yields_nothing(self) -> None:
        self.run_mock.return_value = _completed("INFO: There are no scheduled tasks presently available at your access level.\r\n")
        self.assertEqual(self.tasker.query(), [])

    def test_exists(self) -> None:
        self.run_mock.return_value = _completed(QUERY_NH)
        self.assertTrue(self.tasker.exists("Test"))
        self.assertTrue(self.tasker.exists("scheduleddefrag", own=False))
        self.assertFalse(self.tasker.exists("Tes"))
        self.assertFalse(self.tasker.exists("Missing"))


class TestErrors(_RunPatch):
    def test_nonzero_exit_raises_with_output(self) -> None:
        self.run_mock.return_value = _completed("ERROR: Access is denied.\r\n", returncode=1)
        with self.assertRaises(TaskError) as ctx:
            self.tasker.run("Test")
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertIn("Access is denied", ctx.exception.output)
        self.assertEqual(ctx.exception.cmd, ["/RUN", "/TN", "py-wintask-Test", "/I"])

    def test_not_found(self) -> None:
        self.run_mock.return_value = _completed(
            'ERROR: The system cannot find the file specified.\r\n', returncode=1
        )
        with self.assertRaises(TaskNotFoundError):
            self.tasker.delete("Missing", force=True)

    def test_already_exists(self) -> None:
        self.run_mock.return_value = _completed(
            "ERROR: Cannot create a file when that file already exists.\r\n", returncode=1
        )
        with self.assertRaises(TaskAlreadyExistsError):
            self.tasker.create(TaskCreate(taskname="Test", taskrun="x"))

    def test_missing_binary(self) -> None:
        self.run_mock.side_effect = FileNotFoundError(2, "No such file or directory")
        with self.assertRaises(SchtasksNotAvailableError):
            self.tasker.query()


if __name__ == "__main__":
    unittest.main()
