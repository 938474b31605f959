from vtterm.arguments import DEFAULT_BOUNDS, Arguments


def test_defaults():
    arguments = Arguments(["/bin/sh", "-l"])
    assert arguments.shell_arguments == ["/bin/sh", "-l"]
    assert arguments.standard_shell
    assert arguments.bounds == DEFAULT_BOUNDS
    assert not arguments.usage_requested


def test_help():
    arguments = Arguments()
    arguments.parse(["Terminal", "--help"])
    assert arguments.usage_requested


def test_title_and_working_directory():
    arguments = Arguments()
    arguments.parse(["Terminal", "-t", "My title", "--working-directory", "/tmp"])
    assert arguments.title == "My title"
    assert arguments.working_directory == "/tmp"


def test_fullscreen():
    arguments = Arguments()
    arguments.parse(["Terminal", "-f"])
    assert arguments.full_screen


def test_missing_title_value_requests_usage():
    arguments = Arguments()
    arguments.parse(["Terminal", "--title"])
    assert arguments.usage_requested
    assert arguments.title is None


def test_unknown_option(capsys):
    arguments = Arguments()
    arguments.parse(["Terminal", "-x"])
    assert arguments.usage_requested
    assert '"-x"' in capsys.readouterr().err


def test_remainder_is_shell_command():
    arguments = Arguments(["/bin/sh", "-l"])
    arguments.parse(["Terminal", "-f", "vim", "-h", "file"])
    assert arguments.shell_arguments == ["vim", "-h", "file"]
    assert not arguments.standard_shell
    assert not arguments.usage_requested
    assert arguments.full_screen


def test_default_args_are_copied():
    defaults = ["/bin/sh"]
    arguments = Arguments(defaults)
    defaults.append("-l")
    assert arguments.shell_arguments == ["/bin/sh"]