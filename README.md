# vtterm

`vtterm` is the core of a terminal emulator, as a library. It holds the screen
and its scrollback, starts a shell on a pseudo-terminal, keeps the user's
preferences, resolves colour names and expands title patterns.

## What is in the package

**Screen buffer** (`vtterm.buffer`)

`BasicTerminalBuffer(width, height, history_capacity=0)` is a grid of cells
with a cursor, a scroll region, tab stops every eight columns, origin mode,
insert and overwrite modes and full-width characters. It offers the usual
editing operations: `insert_char`, `insert_cr`, `insert_lf`, `insert_ri`,
`insert_tab`, `insert_cursor_back_tab`, `insert_space`, `insert_lines`,
`erase_chars`, `erase_above`, `erase_below`, `erase_all`, `erase_scrollback`,
`delete_chars`, `delete_columns`, `delete_lines`, `scroll_by`,
`set_scroll_region`, `fill_screen` and more. Cursor movement is clamped to the
screen, or to the scroll region while origin mode is on. `save_cursor` and
`restore_cursor` work as a stack.

Lines that scroll off the top of the screen go into a `HistoryBuffer`. Negative
row indices address that scrollback, so `get_char`, `get_string`,
`get_cell_attributes`, `line_length` and `history_line_at` read history and
screen alike. `get_char` returns a `CellKind` telling a character apart from
the second half of a full-width one or an empty position. A `DirtyInfo` in
`dirty_info` records which rows changed and how many lines were scrolled;
override `notify_listener` to hear when the buffer first becomes dirty.
`synchronize_with` copies the dirty rows of another buffer into this one.

**Scrollback** (`vtterm.history`)

`HistoryBuffer(width, capacity)` keeps a bounded ring of past lines. It stores
each line as its text and runs of attributes, and turns it back into a
`TerminalLine` of `TerminalCell`s with `get_terminal_line_at`. The oldest lines
are dropped once the capacity or the storage budget is used up. `Attributes`
holds a cell's state bits and colours.

**Resizing** (`vtterm.resize`)

`ResizableTerminalBuffer.resize_to(width, height, history_capacity=None)`
changes the size and, if given, the scrollback capacity. When the width stays
the same and the screen gets shorter, the top lines move into the scrollback
so that the cursor row stays on screen; when it gets taller, empty lines are
added at the bottom. When the width changes, all lines, scrollback included,
are re-wrapped to the new width and the cursor follows its character. Sizes
outside 4–1024 columns or 2–1024 rows raise `ValueError`.
`set_history_capacity` changes the capacity alone, keeping the newest lines.

**Selection and search** (`vtterm.search`)

`get_string_from_region` copies text between two `TermPos` positions and keeps
soft-wrapped lines joined. `find_word` returns the range of the word, or of the
run of like characters, under a position, using `classify_char` or a
classifier of your own returning a `CharType`. `previous_line_pos` and
`next_line_pos` step across soft wraps. `find` searches forwards or backwards,
with or without case sensitivity (ASCII letters only), and optionally for
whole words only; it returns the match range or `None`.

**Shell** (`vtterm.shell`, `vtterm.shell_params`, `vtterm.process_info`)

`Shell.open(rows, columns, parameters)` starts the user's login shell, or the
program named in a `ShellParameters`, on a new pseudo-terminal, in the working
directory given there. It sets `TERM`, `COLORTERM`, `TTY` and `TTYPE` and
configures the terminal modes. `read`, `write`, `update_window_size`,
`get_attr`, `set_attr`, `tty_name` and `fileno` work on the master side;
`close` hangs the shell up and reaps it, and `Shell` is also a context
manager. `has_active_processes` tells whether something other than the shell
is in the foreground, and `get_active_process_info` describes it as an
`ActiveProcessInfo`, or returns `None`. Starting failures and use of a closed
shell raise `ShellError`. `ShellInfo` keeps the process ID and the encoding
name.

**Preferences** (`vtterm.prefs`)

`PrefHandler` is a key/value store with typed getters and setters
(`get_int32`, `get_float`, `get_bool`, `get_rgb`, `get_cursor`, `set_string`,
`set_rgb`, …). It starts from built-in defaults: 80×25, 10000 lines of
scrollback, UTF-8, a blinking block cursor and a standard ANSI palette. Unless
created with `load_settings=False` it also reads the settings file at
`default_path()`, which is `Terminal/Default` under `$XDG_CONFIG_HOME` or
`~/.config`. It reads and writes a simple `"key" , "value"` text format, one
pair per line, with `#` starting a comment. `default_handler` gives a shared
instance. `load_color_scheme` builds a `ColorScheme` from the colour settings,
and `load_themes` gathers colour schemes from theme files in the directories
you name, sorted by name.

**Colours** (`vtterm.colors`)

`RGBColor`, `AnsiColorScheme` and `ColorScheme` describe palettes.
`XColorsTable.look_up_color` understands `rgb:rr/gg/bb`, `#rrggbb`, the
16-bit-per-channel forms of both, `cmyk:c/m/y/k` and `cmy:c/m/y`, and X11
colour names from a table built with `from_rgb_text` or `from_names`. Names are
matched through `hash_color_name`, which ignores spaces and case and treats
"grey" and "gray" alike. Unknown names raise `LookupError`.

**Titles** (`vtterm.patterns`)

`evaluate` expands title patterns such as `%1d: %p%e`. A `PlaceholderMapper`
supplies the value for each placeholder letter. `%%` is a literal percent
sign; `%<…%>` marks text that appears only when the placeholder next to it
produces something.

**Odds and ends**

- `vtterm.arguments.Arguments` parses `-h/--help`, `-t/--title`,
  `-w/--working-directory` and `-f/--fullscreen`. Everything from the first
  non-option on is taken as the program to run.
- `vtterm.hyperlink.HyperLink` holds a URL or path found in terminal text.
  `open` passes it, shell-escaped, to `/bin/open`.
- `vtterm.inline_input.InlineInput` holds the state of an input method: the
  composed string, the selection and its clauses.

## What the package does not do

There is no parser for escape sequences: nothing turns the bytes read from a
`Shell` into calls on a buffer, so a front end has to supply one. There is no
window, drawing, keyboard handling or clipboard, and no command to run; the
package is used from Python code only.

## Requirements

Python 3.10 or later on a POSIX system, and `psutil`.