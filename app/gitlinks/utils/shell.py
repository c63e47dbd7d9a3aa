"""Shell execution utilities.

Provides safe subprocess execution with proper error handling,
including non-blocking background commands (:class:`BackgroundCommand`).
"""

import contextlib
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from typing import IO


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


class BackgroundCommand:
    """A child process started without waiting for it.

    Output is spooled to temporary files rather than pipes, so a chatty
    process can never stall on a full pipe buffer while nobody reads it.
    Call :meth:`poll` repeatedly; it returns None until the process exits.

    Example:
        >>> command = BackgroundCommand.start(["npm", "ls", "--json"], cwd="/srv/app")
        >>> while (result := command.poll()) is None:
        ...     do_other_work()
    """

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        stdout: IO[bytes],
        stderr: IO[bytes],
    ) -> None:
        self._process = process
        self._stdout = stdout
        self._stderr = stderr
        self._result: CommandResult | None = None

    @classmethod
    def start(cls, args: list[str], *, cwd: str | None = None) -> "BackgroundCommand":
        """Launch a command in the background.

        Args:
            args: Command and arguments to execute.
            cwd: Working directory for the command.

        Returns:
            Handle to the running command.

        Raises:
            FileNotFoundError: If command executable is not found.
            OSError: If command cannot be executed.
        """
        stdout = tempfile.TemporaryFile()
        stderr = tempfile.TemporaryFile()
        try:
            process = subprocess.Popen(  # nosec: B603
                args,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=stderr,
                cwd=cwd,
            )
        except OSError:
            stdout.close()
            stderr.close()
            raise
        return cls(process, stdout, stderr)

    @property
    def args(self) -> list[str]:
        """Command line the process was started with."""
        return list(self._process.args)  # type: ignore[arg-type]

    def poll(self) -> CommandResult | None:
        """Check for completion without blocking.

        Returns:
            CommandResult once the process has exited, None while it runs.
        """
        if self._result is not None:
            return self._result

        returncode = self._process.poll()
        if returncode is None:
            return None

        self._result = CommandResult(
            stdout=self._read(self._stdout),
            stderr=self._read(self._stderr),
            returncode=returncode,
        )
        return self._result

    @staticmethod
    def _read(stream: IO[bytes]) -> str:
        with contextlib.closing(stream):
            stream.seek(0)
            return stream.read().decode("utf-8", errors="replace")
