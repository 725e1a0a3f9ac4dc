# lineedit

Pure-Python building blocks for an interactive terminal line editor in the
style of GNU readline. It has no runtime dependencies.

## What is inside

- `lineedit.inputrc`: a parser for inputrc files. It handles key bindings,
  macros, `set` variables, `$if`/`$else`/`$endif` conditionals and
  `$include`.
  - Results go to a `Handler`. The base class keeps binds, variables and
    unknown constructs in memory.
  - Errors are collected as `ParseError`. `Parser(halt_on_err=True)` raises
    the first one instead.
  - Helpers: `unescape`, `decode_key`, `encontrol`, `enmeta` and
    `expand_include_path`.
- `lineedit.cursor`: `Cursor`, which works on a line buffer held as a list of
  characters and edits it in place. It moves over multi-line buffers and
  covers line starts and ends, vertical moves and marks. It applies the
  append-mode and vi command-mode position rules.
- `lineedit.values`: `Candidate` and `Values` for completions.
  - Helpers: `add_raw`, `filter_values`, `filter_prefix` (optionally
    case-insensitive), `each_tag` (groups candidates by tag in order of first
    appearance) and `sort_candidates`.
- `lineedit.suffix`: `SuffixMatcher`, the set of suffix characters that are
  removed automatically after an inserted completion. `*` matches anything.
- `lineedit.messages`: `Messages`, a sorted set of hint messages. Entries can
  be suppressed with regular expressions.
- `lineedit.keys`: `Keys`, the stack of pending keys.
  - It takes input bytes and keys fed by macros.
  - It tracks which keys matched a command.
  - It strips cursor-position reports (`ESC [ row ; col R`) from the input.
    `extract_cursor_pos` does the same on raw bytes.

## Example: parsing an inputrc

```python
from lineedit.inputrc import Handler, parse

handler = Handler()
errors = parse('set editing-mode vi\n"\\C-a": beginning-of-line\n', handler)

print(errors)          # []
print(handler.vars)    # {'editing-mode': 'vi'}
print(handler.binds)   # {'emacs': {'\x01': ('beginning-of-line', False)}}
```

## Example: moving a cursor

```python
from lineedit.cursor import Cursor

line = list("first line\nsecond line")
cursor = Cursor(line)
cursor.line_move(1)
print(cursor.pos, cursor.line_pos())  # 11 1
```

## Example: buffering keys

```python
from lineedit.keys import Keys

keys = Keys()
print(keys.push_input(b"ab\x1b[12;5R"))  # b'\x1b[12;5R'
print(keys.pop())                         # 97
print(keys.caller())                      # 'a'
```

## What it does not do

This package contains no interactive editor of its own, so you combine its
parts yourself. It does not:

- read the terminal or put it in raw mode;
- render a prompt or a completion menu;
- lay completions out in columns;
- provide ANSI colour helpers;
- keep numeric-argument counts.

## Running the tests

```
pip install -e .[test]
pytest
```