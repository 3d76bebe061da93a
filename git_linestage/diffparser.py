# Unified diff parser and related structures
#
# Copyright 2008—2011, 2014 Mark Edgington <edgimar@gmail.com>
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# This code is based on the patch parser of Mercurial.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from .util import unwrap_filename

lines_re = re.compile(r'@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)')

NO_NEWLINE_MARKER = '\\ No newline at end of file'


class PatchError(Exception):
    pass


class MalformedDiffError(PatchError):
    pass


class DiffLineType(enum.Enum):
    CONTEXT = ' '
    ADDITION = '+'
    DELETION = '-'


@dataclass(frozen=True)
class DiffLine:
    """One line of a hunk, marker character included"""

    kind: DiffLineType
    text: str
    old_line_number: Optional[int]
    new_line_number: Optional[int]
    no_trailing_newline: bool = False

    def __post_init__(self):
        if self.old_line_number is None and self.new_line_number is None:
            raise ValueError("a diff line needs at least one line number")

    @property
    def content(self) -> str:
        return self.text[1:]

    @property
    def is_change(self) -> bool:
        return self.kind is not DiffLineType.CONTEXT

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class HunkHeader:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section_heading: str = ''

    def __str__(self) -> str:
        r"""Render the header, omitting counts equal to 1

        >>> str(HunkHeader(1, 1, 1, 2))
        '@@ -1 +1,2 @@'
        >>> str(HunkHeader(0, 0, 1, 1, ' def main():'))
        '@@ -0,0 +1 @@ def main():'
        """
        def limits(start, count):
            if count == 1:
                return '%d' % start
            return '%d,%d' % (start, count)

        return '@@ -%s +%s @@%s' % (
            limits(self.old_start, self.old_count),
            limits(self.new_start, self.new_count),
            self.section_heading,
        )


@dataclass(frozen=True)
class Hunk:
    """A contiguous change region

    unified_diff_start and unified_diff_end delimit, as a half-open range,
    the absolute indices of this hunk's lines within the whole diff.
    """

    header: HunkHeader
    lines: tuple[DiffLine, ...]
    unified_diff_start: int
    unified_diff_end: int

    def indexed_lines(self) -> Iterator[tuple[int, DiffLine]]:
        return enumerate(self.lines, self.unified_diff_start)

    def changed_line_indices(self) -> list[int]:
        return [index for index, line in self.indexed_lines() if line.is_change]

    def __str__(self) -> str:
        return '\n'.join([str(self.header)] + [line.text for line in self.lines])


@dataclass(frozen=True)
class Diff:
    """One file's change, as a sequence of hunks"""

    old_path: Optional[str]
    new_path: Optional[str]
    hunks: tuple[Hunk, ...]

    @property
    def is_new_file(self) -> bool:
        return self.old_path is None

    @property
    def is_deleted_file(self) -> bool:
        return self.new_path is None

    @property
    def line_count(self) -> int:
        if not self.hunks:
            return 0
        return self.hunks[-1].unified_diff_end

    def line(self, index: int) -> DiffLine:
        for hunk in self.hunks:
            if hunk.unified_diff_start <= index < hunk.unified_diff_end:
                return hunk.lines[index - hunk.unified_diff_start]
        raise IndexError("line index %d out of range" % index)

    def changed_line_indices(self) -> list[int]:
        return [index for hunk in self.hunks for index in hunk.changed_line_indices()]

    def __repr__(self) -> str:
        return '<diff %r %r, %d hunks>' % (self.old_path, self.new_path, len(self.hunks))


def splitlines(text: str) -> list[str]:
    r"""Split text into physical lines on LF only

    >>> splitlines(' a\r\n+b\n')
    [' a\r', '+b']
    >>> splitlines(' a\n+b')
    [' a', '+b']
    >>> splitlines('')
    []
    """
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return lines


def filepath(line: str, prefix: str) -> Optional[str]:
    r"""Extract the path from a "---" or "+++" line

    >>> filepath('--- a/folder1/g', 'a/')
    'folder1/g'
    >>> filepath('+++ /dev/null', 'b/')
    >>> filepath('+++ "b/file\\55name"\t', 'b/')
    'file-name'
    """
    name = line[4:].rstrip('\t')
    if '\t' in name and not name.startswith('"'):
        # GNU diff appends a timestamp after a tab
        name = name.split('\t', 1)[0]
    if name == '/dev/null':
        return None
    return unwrap_filename(name).removeprefix(prefix)


def scandiff(text: str):
    r"""Read a single-file diff and yield the following events:

    - ('file',      [fromfile, tofile])
    - ('range',     (oldstart, oldcount, newstart, newcount, heading))
    - ('line',      line)
    - ('nonewline', marker)
    - ('other',     line)

    Each event comes with the 1-based number of the input line it was
    found on.

    >>> rawdiff = '''--- a/folder1/g
    ... +++ b/folder1/g
    ... @@ -1,2 +1,2 @@ some context
    ...  1
    ... -2
    ... +2.1
    ... \\ No newline at end of file'''
    >>> for event in scandiff(rawdiff):
    ...     print(event)
    (1, 'file', ['--- a/folder1/g', '+++ b/folder1/g'])
    (3, 'range', ('1', '2', '1', '2', ' some context'))
    (4, 'line', ' 1')
    (5, 'line', '-2')
    (6, 'line', '+2.1')
    (7, 'nonewline', '\\ No newline at end of file')
    """
    lines = splitlines(text)
    if len(lines) < 2 or not lines[0].startswith('--- ') or not lines[1].startswith('+++ '):
        raise MalformedDiffError("diff does not start with '--- ' and '+++ ' lines")
    yield 1, 'file', lines[0:2]

    for lineno, line in enumerate(lines[2:], 3):
        if line[0:1] in (' ', '+', '-'):
            yield lineno, 'line', line
        elif line.startswith('\\'):
            yield lineno, 'nonewline', line
        else:
            m = lines_re.match(line)
            if m:
                yield lineno, 'range', m.groups()
            else:
                yield lineno, 'other', line


class DiffParser:
    r"""Single-file unified diff parsing state machine

    >>> rawdiff = '''--- a/folder1/g
    ... +++ b/folder1/g
    ... @@ -1,6 +1,5 @@
    ...  1
    ...  2
    ... -3
    ...  4
    ...  5
    ...  6
    ... @@ -7,2 +6,4 @@
    ... +6.1
    ... +6.2
    ...  7
    ...  8
    ... '''
    >>> diff = DiffParser().parse(rawdiff)
    >>> diff
    <diff 'folder1/g' 'folder1/g', 2 hunks>
    >>> [(h.unified_diff_start, h.unified_diff_end) for h in diff.hunks]
    [(0, 6), (6, 10)]
    >>> diff.line(2)
    DiffLine(kind=<DiffLineType.DELETION: '-'>, text='-3', old_line_number=3,
             new_line_number=None, no_trailing_newline=False)
    >>> diff.changed_line_indices()
    [2, 6, 7]

    Counts that disagree with the hunk contents are rejected:
    >>> try:
    ...     DiffParser().parse('--- a/f\n+++ b/f\n@@ -1,2 +1,2 @@\n 1\n')
    ... except MalformedDiffError as e:
    ...     print(e)
    line 4: hunk ended early, expected -1,2 +1,2 lines, got -1,1 +1,1
    """

    def __init__(self):
        self.oldpath: Optional[str] = None
        self.newpath: Optional[str] = None
        self.hunks: list[Hunk] = []
        self.header: Optional[HunkHeader] = None
        self.lines: list[DiffLine] = []
        self.oldline = 0
        self.newline = 0
        self.oldseen = 0
        self.newseen = 0
        self.index = 0
        self.lineno = 0

    def error(self, msg: str) -> MalformedDiffError:
        return MalformedDiffError('line %d: %s' % (self.lineno, msg))

    def newfile(self, files):
        fromfile, tofile = files
        self.oldpath = filepath(fromfile, 'a/')
        self.newpath = filepath(tofile, 'b/')

    def addrange(self, limits):
        """Start a new hunk from the parsed range line."""
        oldstart, oldcount, newstart, newcount, heading = limits
        oldcount = 1 if oldcount is None else int(oldcount)
        newcount = 1 if newcount is None else int(newcount)
        # a created file has no old side, whatever count the producer put
        # there, and a removed file has no new side
        if self.oldpath is None:
            oldcount = 0
        if self.newpath is None:
            newcount = 0
        self.header = HunkHeader(int(oldstart), oldcount,
                                 int(newstart), newcount, heading)
        self.oldline = int(oldstart)
        self.newline = int(newstart)
        self.oldseen = self.newseen = 0
        self.lines = []

    def addline(self, text: str):
        kind = DiffLineType(text[0])
        oldnumber = newnumber = None
        if kind is not DiffLineType.ADDITION:
            oldnumber = self.oldline
            self.oldline += 1
            self.oldseen += 1
        if kind is not DiffLineType.DELETION:
            newnumber = self.newline
            self.newline += 1
            self.newseen += 1
        if self.oldseen > self.header.old_count or self.newseen > self.header.new_count:
            raise self.error("hunk is longer than its header %s says" % self.header)
        self.lines.append(DiffLine(kind, text, oldnumber, newnumber))

    def nonewline(self, marker: str):
        last = self.lines[-1]
        self.lines[-1] = DiffLine(last.kind, last.text,
                                  last.old_line_number, last.new_line_number,
                                  no_trailing_newline=True)

    def complete(self) -> bool:
        return (self.oldseen == self.header.old_count and
                self.newseen == self.header.new_count)

    def endhunk(self):
        """Check the hunk is complete and add it to the list of hunks."""
        if not self.complete():
            raise self.error(
                "hunk ended early, expected -%d,%d +%d,%d lines, got -%d,%d +%d,%d" % (
                    self.header.old_start, self.header.old_count,
                    self.header.new_start, self.header.new_count,
                    self.header.old_start, self.oldseen,
                    self.header.new_start, self.newseen,
                ))
        start = self.index
        self.index += len(self.lines)
        self.hunks.append(Hunk(self.header, tuple(self.lines), start, self.index))
        self.header = None
        self.lines = []

    transitions = {
        'start': {'file': newfile},
        'file': {'range': addrange},
        'range': {'range': addrange,
                  'line': addline},
        'line': {'range': addrange,
                 'line': addline,
                 'nonewline': nonewline},
        'nonewline': {'range': addrange,
                      'line': addline},
    }

    def parse(self, text: str) -> Diff:
        state = 'start'
        for lineno, newstate, data in scandiff(text):
            self.lineno = lineno
            if newstate in ('range', 'other') and self.header is not None:
                # raises if the hunk is short of lines
                self.endhunk()
            try:
                transition = self.transitions[state][newstate]
            except KeyError:
                if state == 'file':
                    raise self.error("expected a hunk header, got %r" % data)
                raise self.error("unexpected diff content %r" % data)
            transition(self, data)
            state = newstate

        if state == 'file':
            raise self.error("diff has no hunks")
        self.endhunk()

        return Diff(self.oldpath, self.newpath, tuple(self.hunks))


def parse_diff(text: str) -> Diff:
    """Parse one file's unified diff, raising MalformedDiffError on bad input"""
    return DiffParser().parse(text)
