"""A shell process running on a pseudo terminal."""

from __future__ import annotations

import errno
import fcntl
import os
import pty
import pwd
import signal
import struct
import sys
import termios
from typing import Any

import psutil

from vtterm.process_info import ActiveProcessInfo
from vtterm.shell_params import ShellInfo, ShellParameters

DEFAULT_SHELL = "/bin/sh"
COLOR_TERMINAL_TYPE = "truecolor"
TERMINAL_TYPE = "xterm-256color"

_HANDSHAKE_OK = b"\x00"
_HANDSHAKE_FAILED = b"\x01"


class ShellError(RuntimeError):
    """Raised when the shell cannot be started or is not open."""


def _ctrl(char: str) -> int:
    return ord(char) & 0x1F


def _flag(name: str) -> int:
    return getattr(termios, name, 0)


def _initialize_termios(attrs: list[Any]) -> list[Any]:
    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
    cc = list(cc)

    lflag |= termios.ECHOE

    iflag &= ~(termios.INLCR | termios.IGNCR)
    iflag |= termios.ICRNL
    iflag &= ~termios.ISTRIP

    oflag &= ~(
        _flag("OCRNL") | _flag("ONLRET") | _flag("NLDLY") | _flag("CRDLY")
        | _flag("TABDLY") | _flag("BSDLY") | _flag("VTDLY") | _flag("FFDLY")
    )
    oflag |= termios.ONLCR | termios.OPOST

    cflag &= ~_flag("CBAUD")
    cflag |= _flag("B19200") if hasattr(termios, "CBAUD") else 0
    ispeed = ospeed = termios.B19200

    cflag &= ~termios.CSIZE
    cflag |= termios.CS8 | termios.CREAD | termios.HUPCL
    iflag &= ~(termios.IGNBRK | termios.BRKINT)

    lflag |= termios.ISIG | termios.ICANON | termios.ECHO | termios.ECHOE | termios.ECHONL
    lflag &= ~(termios.ECHOK | termios.IEXTEN)

    settings = {
        "VINTR": _ctrl("C"),
        "VQUIT": _ctrl("\\"),
        "VERASE": 0x7F,
        "VKILL": _ctrl("U"),
        "VEOF": _ctrl("D"),
        "VEOL": 0,
        "VMIN": 4,
        "VTIME": 0,
        "VEOL2": 0,
        "VSWTCH": 0,
        "VSWTC": 0,
        "VSTART": _ctrl("S"),
        "VSTOP": _ctrl("Q"),
        "VSUSP": _ctrl("Z"),
    }
    for name, value in settings.items():
        index = getattr(termios, name, None)
        if index is not None and index < len(cc):
            cc[index] = value

    return [iflag, oflag, cflag, lflag, ispeed, ospeed, cc]


def _set_window_size(fd: int, rows: int, columns: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, columns, 0, 0))


def _child_fail(pipe: int, message: str) -> None:
    try:
        os.write(pipe, _HANDSHAKE_FAILED + message.encode("utf-8", errors="replace"))
    finally:
        os._exit(1)


class Shell:
    """A child shell attached to the master side of a pseudo terminal."""

    def __init__(self) -> None:
        self._info = ShellInfo()
        self._fd = -1

    def __enter__(self) -> Shell:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def info(self) -> ShellInfo:
        return self._info

    @property
    def process_id(self) -> int:
        return self._info.process_id

    @property
    def encoding(self) -> str:
        return self._info.encoding

    @encoding.setter
    def encoding(self, encoding: str) -> None:
        self._info.set_encoding(encoding)

    def open(self, rows: int, columns: int, parameters: ShellParameters) -> None:
        """Start the shell on a new pseudo terminal of the given size."""
        if self._fd >= 0:
            raise ShellError("shell is already open")
        self._spawn(rows, columns, parameters)

    def close(self) -> None:
        """Close the terminal, hang up the shell and reap it."""
        if self._fd < 0:
            return
        os.close(self._fd)
        self._fd = -1
        pid = self._info.process_id
        self._info.process_id = -1
        if pid > 0:
            try:
                os.killpg(pid, signal.SIGHUP)
            except OSError:
                pass
            try:
                os.waitpid(pid, 0)
            except ChildProcessError:
                pass

    def _require_open(self) -> None:
        if self._fd < 0:
            raise ShellError("shell is not open")

    def tty_name(self) -> str:
        self._require_open()
        return os.ttyname(self._fd)

    def read(self, size: int) -> bytes:
        self._require_open()
        return os.read(self._fd, size)

    def write(self, data: bytes) -> int:
        self._require_open()
        return os.write(self._fd, data)

    def update_window_size(self, rows: int, columns: int) -> None:
        self._require_open()
        _set_window_size(self._fd, rows, columns)

    def get_attr(self) -> list[Any]:
        self._require_open()
        return termios.tcgetattr(self._fd)

    def set_attr(self, attributes: list[Any]) -> None:
        self._require_open()
        termios.tcsetattr(self._fd, termios.TCSANOW, attributes)

    def fileno(self) -> int:
        return self._fd

    def _foreground_group(self) -> int:
        try:
            return os.tcgetpgrp(self._fd)
        except OSError:
            return -1

    def has_active_processes(self) -> bool:
        """True if a process other than the shell owns the terminal."""
        running = self._foreground_group()
        return not (running == self._info.process_id or running == -1)

    def get_active_process_info(self) -> ActiveProcessInfo | None:
        """Describe the terminal's foreground process group leader."""
        process = self._foreground_group()
        if process < 0:
            return None
        try:
            handle = psutil.Process(process)
            name = handle.name()
            cwd = handle.cwd()
        except psutil.Error:
            return None
        info = ActiveProcessInfo()
        info.set_to(process, name, cwd)
        return info

    def _spawn(self, rows: int, columns: int, parameters: ShellParameters) -> None:
        argv = list(parameters.arguments)
        if not argv:
            shell = DEFAULT_SHELL
            try:
                shell = pwd.getpwuid(os.getuid()).pw_shell or DEFAULT_SHELL
            except KeyError:
                pass
            argv = [shell, "-l"]
            self._info.is_default_shell = True
        else:
            self._info.is_default_shell = False
        self._info.set_encoding(parameters.encoding)

        try:
            signal.signal(signal.SIGTTOU, signal.SIG_IGN)
        except ValueError:
            pass

        try:
            master, slave = pty.openpty()
        except OSError as error:
            raise ShellError("didn't find any available pseudo ttys") from error
        try:
            tty_name = os.ttyname(slave)
        except OSError as error:
            os.close(master)
            os.close(slave)
            raise ShellError("failed to init pseudo tty") from error

        handshake_read, handshake_write = os.pipe()
        environment = dict(os.environ)
        environment.update(
            COLORTERM=COLOR_TERMINAL_TYPE,
            TERM=TERMINAL_TYPE,
            TTY=tty_name,
            TTYPE=self._info.encoding_name,
        )

        try:
            pid = os.fork()
        except OSError as error:
            for fd in (master, slave, handshake_read, handshake_write):
                os.close(fd)
            raise ShellError("could not fork the shell process") from error

        if pid == 0:
            self._run_child(
                master, slave, handshake_read, handshake_write, tty_name,
                rows, columns, argv, environment, parameters.current_directory,
            )

        self._info.process_id = pid
        os.close(slave)
        os.close(handshake_write)
        data = b""
        try:
            while True:
                chunk = os.read(handshake_read, 512)
                if not chunk:
                    break
                data += chunk
                if data[:1] == _HANDSHAKE_OK:
                    break
        finally:
            os.close(handshake_read)

        if data[:1] != _HANDSHAKE_OK:
            message = data[1:].decode("utf-8", errors="replace") or "mismatch handshake."
            print(message, file=sys.stderr)
            os.close(master)
            try:
                os.waitpid(pid, 0)
            except ChildProcessError:
                pass
            self._info.process_id = -1
            raise ShellError(message)

        self._fd = master

    @staticmethod
    def _run_child(
        master: int, slave: int, handshake_read: int, handshake_write: int,
        tty_name: str, rows: int, columns: int, argv: list[str],
        environment: dict[str, str], current_directory: str,
    ) -> None:
        try:
            os.close(master)
            os.close(handshake_read)
            try:
                os.setsid()
            except OSError:
                _child_fail(handshake_write, "could not set session leader.")
            try:
                terminal = os.open(tty_name, os.O_RDWR)
            except OSError:
                _child_fail(handshake_write, f"can't open tty ({tty_name}).")
            os.close(slave)
            if hasattr(termios, "TIOCSCTTY"):
                try:
                    fcntl.ioctl(terminal, termios.TIOCSCTTY, 0)
                except OSError:
                    pass

            for signum in (
                signal.SIGCHLD, signal.SIGHUP, signal.SIGQUIT, signal.SIGTERM,
                signal.SIGINT, signal.SIGTTOU, signal.SIGPIPE,
            ):
                signal.signal(signum, signal.SIG_DFL)

            attrs = _initialize_termios(termios.tcgetattr(terminal))

            for fd in (0, 1, 2):
                os.dup2(terminal, fd)
            if terminal > 2:
                os.close(terminal)

            try:
                termios.tcsetattr(0, termios.TCSANOW, attrs)
            except (OSError, termios.error):
                _child_fail(handshake_write, "failed set terminal interface (TERMIOS).")

            try:
                _set_window_size(0, rows, columns)
            except OSError:
                pass
            try:
                os.tcsetpgrp(0, os.getpgrp())
            except OSError:
                pass

            os.write(handshake_write, _HANDSHAKE_OK)

            if current_directory:
                try:
                    os.chdir(current_directory)
                except OSError:
                    pass
            try:
                os.execve(argv[0], argv, environment)
            except OSError as error:
                message = f'Cannot execute "{argv[0]}":\n\t{os.strerror(error.errno or errno.ENOENT)}\n'
                os.write(2, message.encode("utf-8", errors="replace"))
        finally:
            os._exit(1)