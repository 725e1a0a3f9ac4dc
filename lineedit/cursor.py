"""Cursor position and movements in an editable line buffer."""

from lineedit.inputrc import NEWLINE, SPACE, TAB

_NUL = "\0"


def _newlines(line):
    """Return the indexes of all newlines, plus one for the end of the buffer."""
    positions = [i for i, char in enumerate(line) if char == NEWLINE]
    positions.append(len(line))
    return positions


def _find(line, char, pos, forward):
    """Return the index of the next char from pos (exclusive), or -1."""
    step = 1 if forward else -1
    pos += step
    while 0 <= pos <= len(line) - 1:
        if line[pos] == char:
            return pos
        pos += step
    return -1


class Cursor:
    """A cursor in a line buffer, given as a mutable list of characters.

    The cursor shares the list with its owner: edits made through the
    cursor change the list in place.
    """

    def __init__(self, line, pos=0, mark=-1):
        self.line = line
        self._pos = pos
        self._mark = mark

    def __repr__(self):
        return f"Cursor(pos={self._pos}, mark={self._mark})"

    @property
    def pos(self):
        """The cursor position, always between 0 and the length of the line."""
        self.check_append()
        return self._pos

    @property
    def mark(self):
        """The insertion point mark, or -1 if not set."""
        return self._mark

    def set(self, pos):
        """Set the position, clamped to the bounds of the line."""
        self._pos = max(0, min(pos, len(self.line)))
        self.check_append()

    def inc(self):
        """Move one character forward, unless at the end of the line."""
        if self._pos < len(self.line):
            self._pos += 1

    def dec(self):
        """Move one character backward, unless at the beginning of the line."""
        if self._pos > 0:
            self._pos -= 1

    def move(self, offset):
        """Move by a relative offset, clamped to the bounds of the line."""
        self._pos += offset
        self.check_append()

    def char(self):
        """Return the character under the cursor, or NUL when appending or empty."""
        self.check_append()
        if not self.line or self._pos >= len(self.line):
            return _NUL
        return self.line[self._pos]

    def replace_with(self, char):
        """Replace the character under the cursor, or append it at the end of the line."""
        self.check_append()
        if self._pos == len(self.line):
            self.line.append(char)
        else:
            self.line[self._pos] = char

    def insert_at(self, *args):
        """Insert characters at the cursor and move past them."""
        self.check_append()
        chars = list("".join(args))
        self.line[self._pos:self._pos] = chars
        self._pos += len(chars)

    def _on_space(self):
        return self.char() in (SPACE, NEWLINE, TAB)

    def to_first_non_space(self, forward):
        """Move to the nearest character that is not a space, tab or newline.

        At the end of the line the move is always backward.
        """
        if not self.line:
            return

        if self._pos >= len(self.line):
            forward = False
            self._pos = len(self.line) - 1

        if forward or self._pos != 0:
            while self._on_space():
                self._pos += 1 if forward else -1
                if self._pos <= 0:
                    break

        self.check_append()

    def beginning_of_line(self):
        """Move to the first character after the previous newline, or to 0."""
        newline = _find(self.line, NEWLINE, self._pos, False)
        self._pos = newline + 1 if newline != -1 else 0
        self.check_command()

    def end_of_line(self):
        """Move to the last character before the next newline, or of the buffer."""
        if not self.on_empty_line():
            newline = _find(self.line, NEWLINE, self._pos, True)
            self._pos = newline - 1 if newline != -1 else len(self.line) - 1
        self.check_command()

    def end_of_line_append(self):
        """Move past the last character of the current line, in append mode."""
        if not self.on_empty_line():
            newline = _find(self.line, NEWLINE, self._pos - 1, True)
            self._pos = newline if newline != -1 else len(self.line)
        self.check_append()

    def set_mark(self):
        """Set the mark at the current position."""
        self.check_append()
        self._mark = self._pos

    def reset_mark(self):
        """Unset the mark."""
        self._mark = -1

    def line_pos(self):
        """Return the index of the line (between newlines) the cursor is on."""
        self.check_append()
        newlines = _newlines(self.line)
        for index, newline in enumerate(newlines):
            if newline >= self._pos:
                return index
        return len(newlines)

    def line_move(self, lines):
        """Move up (negative) or down (positive) by a number of lines, within bounds."""
        self.check_append()

        if len(_newlines(self.line)) == 1 or lines == 0:
            return

        step = self._move_line_up if lines < 0 else self._move_line_down
        for _ in range(abs(lines)):
            step()
            self.check_command()

        self.check_append()

    def on_empty_line(self):
        """Tell whether the cursor is on an empty line of the buffer."""
        line = self.line
        if not line:
            return True
        if self._pos == 0:
            return line[0] == NEWLINE
        if self._pos == len(line):
            return line[self._pos - 1] == NEWLINE
        return line[self._pos] == NEWLINE and line[self._pos - 1] == NEWLINE

    def at_beginning_of_line(self):
        """Tell whether the cursor is at 0 or just after a newline."""
        if self._pos == 0:
            return True
        return any(end == self._pos - 1 for end in _newlines(self.line))

    def at_end_of_line(self):
        """Tell whether the cursor is at the end of the buffer or just before a newline."""
        if self._pos >= len(self.line) - 1:
            return True
        return any(end == self._pos + 1 for end in _newlines(self.line))

    def check_append(self):
        """Clamp the position to the line and drop a mark out of its bounds."""
        length = len(self.line)
        self._pos = max(0, min(self._pos, length))

        if self._mark < -1 or self._mark > length - 1:
            self._mark = -1

    def check_command(self):
        """Like check_append, but keep the cursor on a character (vi command mode)."""
        self.check_append()

        if self._pos == len(self.line) and not self.on_empty_line():
            self._pos -= 1

        if self.line and self._pos < len(self.line) \
                and self.char() == NEWLINE and not self.on_empty_line():
            self.dec()

    def _move_line_down(self):
        newlines = _newlines(self.line)
        current = self.line_pos()
        begin, column = -1, 0

        for index, end in enumerate(newlines):
            if index < current:
                begin = end
                continue
            if index == current:
                column = self._pos - begin
                begin = end
                continue
            self._pos = begin + column if end - begin > column else end
            break

    def _move_line_up(self):
        newlines = _newlines(self.line)
        current = self.line_pos()
        column = 0

        for index in range(len(newlines) - 1, -1, -1):
            end = newlines[index]
            if index > current:
                continue

            if index > 0:
                begin = newlines[index - 1]
            else:
                begin = -1
                end -= 1

            if index == current:
                column = self._pos - begin
                continue

            self._pos = begin + column if end - begin > column else end
            break