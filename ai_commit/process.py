"""Process Runner - Execute external commands with streamed, classified output.

A command is either a shell command line (str, run through the shell) or an
argument vector (list, executed directly). While the process runs, every
chunk it writes is handed to an output sink together with the stream it
came from. Chunks are not line-aligned.
"""

from __future__ import annotations

import codecs
import logging
import queue
import shlex
import subprocess
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

LOG = logging.getLogger(__name__)

Command = Union[str, list]
OutputSink = Callable[["OutputStream", str], None]

CHUNK_SIZE = 4096
KILL_GRACE_SECONDS = 1.0

# Short descriptions for the exit code line of ProcessFailedError
EXIT_CODE_TEXTS = {
    0: "OK",
    1: "General error",
    2: "Misuse of shell builtins",
    126: "Invoked command cannot execute",
    127: "Command not found",
    128: "Invalid exit argument",
    130: "Interrupt",
}


class OutputStream(Enum):
    OUT = "out"
    ERR = "err"


class ProcessState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    START_ERROR = "start_error"


def command_line(command: Command) -> str:
    """Printable form of a command."""
    if isinstance(command, str):
        return command
    return shlex.join(str(part) for part in command)


def describe_exit_code(exit_code: Optional[int]) -> str:
    if exit_code is None:
        return "Unknown error"
    if exit_code < 0:
        return f"Terminated by signal {-exit_code}"
    return EXIT_CODE_TEXTS.get(exit_code, "Unknown error")


@dataclass
class ProcessResult:
    """Terminal report of one invocation."""
    command: Command
    state: ProcessState = ProcessState.NOT_STARTED
    exit_code: Optional[int] = None
    output: str = ""
    error_output: str = ""
    chunks: list[tuple[OutputStream, str]] = field(default_factory=list)
    timed_out: bool = False
    start_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is ProcessState.SUCCEEDED

    @property
    def captured_output(self) -> str:
        """stdout and stderr joined in arrival order."""
        return "".join(data for _, data in self.chunks)


class ProcessError(Exception):
    """Base class for process execution failures."""


class ProcessStartError(ProcessError):
    """Raised when the executable could not be launched at all."""

    def __init__(self, command: Command, reason: str, error_message: Optional[str] = None):
        self.command = command
        self.reason = reason
        self.error_message = error_message
        text = f'The command "{command_line(command)}" could not be started: {reason}'
        if error_message:
            text = f"{error_message}\n\n{text}"
        super().__init__(text)


class ProcessFailedError(ProcessError):
    """Raised by must_run() when the process exits unsuccessfully."""

    def __init__(self, result: ProcessResult, error_message: Optional[str] = None):
        self.result = result
        self.command = result.command
        self.exit_code = result.exit_code
        self.output = result.output
        self.error_output = result.error_output
        self.error_message = error_message

        text = (
            f'The command "{command_line(result.command)}" failed.\n\n'
            f"Exit Code: {result.exit_code}({describe_exit_code(result.exit_code)})"
        )
        if result.timed_out:
            text += "\n\nThe process timed out."
        if result.output:
            text += f"\n\nOutput:\n================\n{result.output}"
        if result.error_output:
            text += f"\n\nError Output:\n================\n{result.error_output}"
        if error_message:
            text = f"{error_message}\n\n{text}"
        super().__init__(text)


def default_output_sink(logger=None) -> OutputSink:
    """Sink forwarding stdout chunks to logger.info and stderr chunks to logger.error."""
    logger = logger or LOG

    def sink(stream: OutputStream, data: str) -> None:
        if stream is OutputStream.OUT:
            logger.info(data)
        else:
            logger.error(data)

    return sink


def _pump(pipe, stream: OutputStream, chunks: queue.Queue) -> None:
    """Read raw chunks from one pipe until EOF, then post a None marker."""
    try:
        while True:
            data = pipe.read1(CHUNK_SIZE)
            if not data:
                break
            chunks.put((stream, data))
    finally:
        pipe.close()
        chunks.put((stream, None))


def _feed(pipe, data: bytes) -> None:
    try:
        pipe.write(data)
    except OSError:
        # Child exited without reading all of its input
        pass
    finally:
        try:
            pipe.close()
        except OSError:
            pass


class ProcessRunner:
    """Runs external commands and reports exactly one terminal status per run."""

    def __init__(self, logger=None):
        self.logger = logger or LOG

    def default_output_sink(self) -> OutputSink:
        return default_output_sink(self.logger)

    def run(
        self,
        command: Command,
        error_message: Optional[str] = None,
        output_sink: Optional[OutputSink] = None,
        verbosity: int = logging.DEBUG,
        *,
        cwd=None,
        env: Optional[dict] = None,
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """Run command to completion. Never raises on a failed or unstartable process."""
        result = ProcessResult(command=command)
        printable = command_line(command)
        LOG.log(verbosity, "RUN %s", printable)

        try:
            process = subprocess.Popen(
                command,
                shell=isinstance(command, str),
                cwd=cwd,
                env=env,
                stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            # ValueError: arguments Popen rejects, e.g. an embedded NUL byte
            result.state = ProcessState.START_ERROR
            result.start_error = getattr(e, "strerror", None) or str(e)
            LOG.log(verbosity, "ERR %s could not be started: %s", printable, result.start_error)
            if error_message:
                self.logger.error(error_message)
            return result

        result.state = ProcessState.RUNNING
        self._drain(process, result, output_sink, input, timeout)

        if result.exit_code == 0 and not result.timed_out:
            result.state = ProcessState.SUCCEEDED
            LOG.log(verbosity, "RES Command ran successfully")
        else:
            result.state = ProcessState.FAILED
            LOG.log(verbosity, "RES %s Command did not run successfully", result.exit_code)
            if error_message:
                self.logger.error(error_message)
        return result

    def must_run(
        self,
        command: Command,
        error_message: Optional[str] = None,
        output_sink: Optional[OutputSink] = None,
        verbosity: int = logging.DEBUG,
        **kwargs,
    ) -> ProcessResult:
        """Like run(), but raise unless the process succeeded."""
        result = self.run(command, error_message, output_sink, verbosity, **kwargs)
        if result.state is ProcessState.START_ERROR:
            raise ProcessStartError(command, result.start_error, error_message)
        if not result.succeeded:
            raise ProcessFailedError(result, error_message)
        return result

    def run_interactive(self, command: Command, error_message: Optional[str] = None, *, cwd=None) -> ProcessResult:
        """Hand the terminal to command (e.g. an editor) and wait for it to exit.

        Nothing is captured and no timeout applies.
        """
        result = ProcessResult(command=command)
        LOG.debug("RUN %s (interactive)", command_line(command))
        try:
            completed = subprocess.run(command, shell=isinstance(command, str), cwd=cwd)
        except OSError as e:
            result.state = ProcessState.START_ERROR
            result.start_error = e.strerror or str(e)
            raise ProcessStartError(command, result.start_error, error_message) from e

        result.exit_code = completed.returncode
        if completed.returncode != 0:
            result.state = ProcessState.FAILED
            raise ProcessFailedError(result, error_message)
        result.state = ProcessState.SUCCEEDED
        return result

    def _drain(self, process, result: ProcessResult, output_sink, input, timeout) -> None:
        """Dispatch output chunks on the calling thread until both pipes hit EOF."""
        chunks: queue.Queue = queue.Queue()
        readers = [
            threading.Thread(target=_pump, args=(process.stdout, OutputStream.OUT, chunks), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, OutputStream.ERR, chunks), daemon=True),
        ]
        for reader in readers:
            reader.start()
        if input is not None:
            threading.Thread(target=_feed, args=(process.stdin, input.encode('utf-8')), daemon=True).start()

        decoders = {
            stream: codecs.getincrementaldecoder('utf-8')(errors='replace')
            for stream in OutputStream
        }
        buffers: dict[OutputStream, list[str]] = {stream: [] for stream in OutputStream}
        deadline = time.monotonic() + timeout if timeout is not None else None
        open_streams = len(readers)

        def emit(stream: OutputStream, text: str) -> None:
            if not text:
                return
            buffers[stream].append(text)
            result.chunks.append((stream, text))
            if output_sink is not None:
                output_sink(stream, text)

        while open_streams:
            wait = None
            if deadline is not None:
                wait = max(deadline - time.monotonic(), 0)
            try:
                stream, data = chunks.get(timeout=wait)
            except queue.Empty:
                if result.timed_out:
                    # Killed, but a grandchild still holds the pipes open
                    break
                result.timed_out = True
                process.kill()
                deadline = time.monotonic() + KILL_GRACE_SECONDS
                continue
            if data is None:
                open_streams -= 1
                emit(stream, decoders[stream].decode(b"", final=True))
                continue
            emit(stream, decoders[stream].decode(data))

        if deadline is not None and not result.timed_out:
            # Pipes closed early, the child may still be running
            try:
                process.wait(timeout=max(deadline - time.monotonic(), 0))
            except subprocess.TimeoutExpired:
                result.timed_out = True
                process.kill()
        result.exit_code = process.wait()
        for reader in readers:
            reader.join(KILL_GRACE_SECONDS if result.timed_out else None)
        result.output = "".join(buffers[OutputStream.OUT])
        result.error_output = "".join(buffers[OutputStream.ERR])


__all__ = [
    "ProcessRunner",
    "ProcessResult",
    "ProcessState",
    "OutputStream",
    "ProcessError",
    "ProcessStartError",
    "ProcessFailedError",
    "default_output_sink",
    "command_line",
]
