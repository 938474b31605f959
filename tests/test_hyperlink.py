from unittest import mock

import pytest

from vtterm.hyperlink import (
    OPEN_COMMAND,
    SHELL_ESCAPE_CHARACTERS,
    HyperLink,
    LinkType,
    escape_for_shell,
)


def test_default_link_is_invalid():
    link = HyperLink()
    assert not link.is_valid
    assert link.text == ""


def test_text_defaults_to_address():
    link = HyperLink("/tmp/file.txt")
    assert link.text == "/tmp/file.txt"
    assert link.link_type is LinkType.URL
    assert link.is_valid


def test_explicit_text():
    link = HyperLink("/tmp/file.txt", LinkType.PATH, text="file.txt")
    assert link.text == "file.txt"
    assert link.address == "/tmp/file.txt"


def test_escape_leaves_plain_text():
    assert escape_for_shell("abc/def.txt") == "abc/def.txt"


def test_escape_space():
    assert escape_for_shell("a b") == "a\\ b"


@pytest.mark.parametrize("char", list(SHELL_ESCAPE_CHARACTERS))
def test_escape_each_special_character(char):
    assert escape_for_shell(char) == "\\" + char


def test_open_invalid_raises():
    with pytest.raises(ValueError):
        HyperLink().open()


@mock.patch("vtterm.hyperlink.subprocess.run")
def test_open_runs_command(run):
    run.return_value = mock.Mock(returncode=0)
    HyperLink("/tmp/a b").open()
    command = run.call_args.args[0]
    assert command == OPEN_COMMAND + " /tmp/a\\ b"
    assert command == OPEN_COMMAND + " " + escape_for_shell("/tmp/a b")


@mock.patch("vtterm.hyperlink.subprocess.run")
def test_open_failure_raises(run):
    run.return_value = mock.Mock(returncode=1)
    with pytest.raises(OSError):
        HyperLink("/tmp/x").open()