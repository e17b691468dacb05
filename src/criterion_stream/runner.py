"""
Test runner driving ``meson test`` and capturing Criterion reports.
"""

import logging
import subprocess
import threading
from typing import IO, Any, Callable, Dict, List, Optional

from .capture import StreamCapture
from .config import RunnerConfig
from .exceptions import ReportError, RunnerError
from .formatting import print_results
from .models import RenderEvent, RunResult

logger = logging.getLogger(__name__)

Send = Callable[[Dict[str, Any]], None]


class TestRunner:
    """Runs Criterion test executables through meson and streams the results."""

    def __init__(self, config: RunnerConfig):
        self.config = config

    def build_test_args(self, suite: Optional[str] = None, name: Optional[str] = None) -> List[str]:
        """
        Build the arguments passed to the Criterion executable.

        Args:
            suite: Test suite to filter on
            name: Test name to filter on; only used together with ``suite``

        Returns:
            List of Criterion arguments
        """
        args = ["--json"]
        if suite and name:
            args.append(f"--filter={suite}/{name}")
        args.extend(self.config.additional_args)
        return args

    def build_command(self, test_exe: str = "", test_args: Optional[List[str]] = None) -> List[str]:
        """
        Build the ``meson test`` command line.

        Args:
            test_exe: Test executable to run, or "" for every test in the project
            test_args: Criterion arguments

        Returns:
            Command as a list of arguments
        """
        command = [self.config.meson_command, "test"]
        if test_exe:
            command.append(test_exe)
        command.extend(["-C", self.config.builddir, "-v"])
        command.append("--test-args=" + " ".join(test_args or []))
        return command

    def title(self, test_exe: str = "", suite: Optional[str] = None, name: Optional[str] = None) -> str:
        """Return a human readable title for a run."""
        if not test_exe:
            return f"Running all tests from {self.config.builddir}"
        return f"Running {test_exe} " + " ".join(self.build_test_args(suite, name))

    def _spawn(self, command: List[str]) -> subprocess.Popen:
        logger.debug("Running %s", " ".join(command))
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise RunnerError(command[0], e)
        if process.stdout is None:
            process.kill()
            process.wait()
            raise RunnerError(command[0], OSError("no stdout pipe"))
        return process

    def compile(self, send: Send) -> int:
        """
        Compile the build directory so build errors reach the user.

        Args:
            send: Render event callback

        Returns:
            Exit code of the compile step
        """
        command = [self.config.meson_command, "compile", "-C", self.config.builddir]
        logger.info("Compiling %s", self.config.builddir)
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise RunnerError(command[0], e)

        if result.returncode != 0:
            logger.warning("Compilation failed with exit code %d", result.returncode)
            for line in result.stdout.splitlines():
                send(RenderEvent("stderr", output=line).to_dict())
            send(RenderEvent("exit", code=result.returncode).to_dict())
        return result.returncode

    def run(
        self,
        send: Send,
        test_exe: str = "",
        suite: Optional[str] = None,
        name: Optional[str] = None,
    ) -> RunResult:
        """
        Run tests and stream their results.

        Args:
            send: Render event callback; may be called from a reader thread
            test_exe: Test executable, or "" to run every test in the project
            suite: Test suite to filter on
            name: Test name to filter on

        Returns:
            RunResult with every captured report and the exit code

        Raises:
            RunnerError: If meson cannot be started
            ReportError: If the test output contains an unparseable report
        """
        if self.config.compile_first:
            code = self.compile(send)
            if code != 0:
                return RunResult(reports=[], exit_code=code)

        send_lock = threading.Lock()

        def locked_send(event: Dict[str, Any]) -> None:
            with send_lock:
                send(event)

        command = self.build_command(test_exe, self.build_test_args(suite, name))
        process = self._spawn(command)
        stderr_thread = threading.Thread(
            target=_forward_stderr, args=(process.stderr, locked_send), daemon=True
        )
        stderr_thread.start()

        capture = StreamCapture()
        result = RunResult()
        finished = False
        try:
            for line in process.stdout:
                done, report = capture.feed(line.rstrip("\r\n"), test_exe)
                if done and report is not None:
                    logger.info("Captured report for %s", report.name or "<unnamed test>")
                    with send_lock:
                        print_results(report, send)
                    result.reports.append(report)
            finished = True
        except ReportError:
            logger.error("Unparseable test output from %s", command[0])
            raise
        finally:
            if not finished:
                if process.poll() is None:
                    logger.warning("Terminating %s", command[0])
                    process.kill()
                process.wait()
                stderr_thread.join()

        result.exit_code = process.wait()
        stderr_thread.join()
        locked_send(RenderEvent("exit", code=result.exit_code).to_dict())
        logger.info(
            "Run finished with exit code %d, %d report(s)", result.exit_code, len(result.reports)
        )
        return result


def _forward_stderr(stream: Optional[IO[str]], send: Send) -> None:
    if stream is None:
        return
    for line in stream:
        send(RenderEvent("stderr", output=line.rstrip("\r\n")).to_dict())
