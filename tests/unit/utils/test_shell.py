"""Unit tests for shell execution utilities."""

import tempfile
from typing import IO
from unittest.mock import MagicMock, patch

import pytest
from gitlinks.utils.shell import BackgroundCommand, CommandResult, command_exists


def _spool(text: str) -> IO[bytes]:
    stream = tempfile.TemporaryFile()
    stream.write(text.encode("utf-8"))
    return stream


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success(self) -> None:
        """Exit code zero is success."""
        assert CommandResult("", "", 0).success is True
        assert CommandResult("", "", 1).success is False


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("gitlinks.utils.shell.shutil.which")
    def test_found(self, mock_which: MagicMock) -> None:
        """A command on PATH exists."""
        mock_which.return_value = "/usr/bin/npm"

        assert command_exists("npm") is True
        mock_which.assert_called_once_with("npm")

    @patch("gitlinks.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """A command not on PATH does not exist."""
        assert command_exists("npm") is False


class TestBackgroundCommand:
    """Tests for BackgroundCommand class."""

    def test_poll_while_running(self) -> None:
        """poll returns None while the process runs."""
        process = MagicMock()
        process.poll.return_value = None
        command = BackgroundCommand(process, _spool(""), _spool(""))

        assert command.poll() is None

    def test_poll_after_exit(self) -> None:
        """poll returns the captured output once the process exited."""
        process = MagicMock()
        process.poll.return_value = 1
        stdout = _spool('{"dependencies": {}}')
        stderr = _spool("npm ERR! missing: ghost\n")
        command = BackgroundCommand(process, stdout, stderr)

        result = command.poll()

        assert result == CommandResult(
            stdout='{"dependencies": {}}',
            stderr="npm ERR! missing: ghost\n",
            returncode=1,
        )
        assert stdout.closed
        assert stderr.closed

    def test_result_is_cached(self) -> None:
        """Polling again returns the same result without re-reading."""
        process = MagicMock()
        process.poll.return_value = 0
        command = BackgroundCommand(process, _spool("ok"), _spool(""))

        first = command.poll()
        second = command.poll()

        assert first is second
        process.poll.assert_called_once()

    def test_undecodable_output(self) -> None:
        """Invalid UTF-8 is replaced rather than raising."""
        process = MagicMock()
        process.poll.return_value = 0
        stdout = tempfile.TemporaryFile()
        stdout.write(b"\xffok")
        command = BackgroundCommand(process, stdout, _spool(""))

        result = command.poll()

        assert result is not None
        assert result.stdout.endswith("ok")

    @patch("gitlinks.utils.shell.subprocess.Popen")
    def test_start(self, mock_popen: MagicMock) -> None:
        """start launches the process without stdin in the given directory."""
        mock_popen.return_value = MagicMock(args=["npm", "ls"])

        command = BackgroundCommand.start(["npm", "ls"], cwd="/srv/app")

        kwargs = mock_popen.call_args.kwargs
        assert mock_popen.call_args.args == (["npm", "ls"],)
        assert kwargs["cwd"] == "/srv/app"
        assert kwargs["stdin"] is not None
        assert command.args == ["npm", "ls"]

    @patch("gitlinks.utils.shell.subprocess.Popen", side_effect=FileNotFoundError("npm"))
    def test_start_missing_executable(self, mock_popen: MagicMock) -> None:
        """A missing executable propagates the error."""
        with pytest.raises(FileNotFoundError):
            BackgroundCommand.start(["npm", "ls"])
