# Partial patch formatter
#
# Copyright 2008—2011, 2014 Mark Edgington <edgimar@gmail.com>
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

import io
from dataclasses import replace
from typing import IO, Sequence

from .diffparser import (
    NO_NEWLINE_MARKER,
    Diff,
    DiffLine,
    DiffLineType,
    Hunk,
    HunkHeader,
    PatchError,
)
from .selection import DiffSelection
from .status import FileStatus, WorkingDirectoryFileChange
from .util import wrap_filename


class EmptySelectionError(PatchError):
    pass


def format_hunk_header(old_start: int, old_count: int,
                       new_start: int, new_count: int,
                       section_heading: str = '') -> str:
    """
    >>> format_hunk_header(4, 10, 4, 6)
    '@@ -4,10 +4,6 @@\\n'
    >>> format_hunk_header(0, 0, 1, 1)
    '@@ -0,0 +1 @@\\n'
    """
    return '%s\n' % HunkHeader(old_start, old_count, new_start, new_count, section_heading)


def format_patch_header(file: WorkingDirectoryFileChange, removes_file: bool = True) -> str:
    """Return the "---" and "+++" lines for a patch to the file

    A deleted file only gets /dev/null as its new side when the patch
    removes it completely; otherwise the file stays, with fewer lines.

    >>> from git_linestage.selection import DiffSelectionType
    >>> everything = DiffSelection.from_initial_selection(DiffSelectionType.ALL)
    >>> print(format_patch_header(
    ...     WorkingDirectoryFileChange('file.md', FileStatus.NEW, everything)), end='')
    --- /dev/null
    +++ b/file.md
    >>> print(format_patch_header(
    ...     WorkingDirectoryFileChange('my file.md', FileStatus.MODIFIED, everything)), end='')
    --- a/my file.md\t
    +++ b/my file.md\t
    """
    if file.status is FileStatus.NEW:
        fromfile = None
    elif file.status is FileStatus.RENAMED and file.old_path is not None:
        fromfile = 'a/' + file.old_path
    else:
        fromfile = 'a/' + file.path
    if file.status is FileStatus.DELETED and removes_file:
        tofile = None
    else:
        tofile = 'b/' + file.path

    def fileline(marker, name):
        if name is None:
            return '%s /dev/null\n' % marker
        # git appends a tab to names with spaces so that patch(1) can
        # tell where they end
        return '%s %s%s\n' % (marker, wrap_filename(name), '\t' if ' ' in name else '')

    return fileline('---', fromfile) + fileline('+++', tofile)


class FilteredHunk:
    """A hunk with the unselected changes taken out"""

    def __init__(self, hunk: Hunk, selection: DiffSelection, newfile: bool = False):
        self.hunk = hunk
        self.lines: list[DiffLine] = []
        self.added = self.removed = self.context = 0
        for index, line in hunk.indexed_lines():
            if line.kind is DiffLineType.CONTEXT:
                self.lines.append(line)
                self.context += 1
            elif selection.is_selected(index):
                self.lines.append(line)
                if line.kind is DiffLineType.ADDITION:
                    self.added += 1
                else:
                    self.removed += 1
            elif line.kind is DiffLineType.DELETION:
                # the line stays in the file
                self.lines.append(replace(line, kind=DiffLineType.CONTEXT,
                                          text=' ' + line.content))
                self.context += 1
            # an unselected addition never happened
        self.newfile = newfile
        self.fixnewline()

    def fixnewline(self) -> None:
        """Give a kept last line its newline back if lines get added after it

        The old file's last line may lack a newline. When it stays in the
        file and an addition follows it, it has to be replaced with the
        same text ending in a newline, or git would glue the added line
        onto it.
        """
        for i, line in enumerate(self.lines):
            if line.kind is not DiffLineType.CONTEXT or not line.no_trailing_newline:
                continue
            if not any(later.kind is DiffLineType.ADDITION for later in self.lines[i + 1:]):
                continue
            self.lines[i:i + 1] = [
                replace(line, kind=DiffLineType.DELETION, text='-' + line.content),
                replace(line, kind=DiffLineType.ADDITION, text='+' + line.content,
                        no_trailing_newline=False),
            ]
            self.context -= 1
            self.removed += 1
            self.added += 1
            break

    @property
    def applied(self) -> bool:
        return bool(self.added or self.removed)

    @property
    def fromlen(self) -> int:
        return 0 if self.newfile else self.context + self.removed

    @property
    def tolen(self) -> int:
        return self.context + self.added

    def delta(self) -> int:
        """How much this hunk changes the length of the file"""
        if not self.applied:
            return 0
        return self.added - self.removed

    def header(self, fixoffset: int = 0) -> HunkHeader:
        """Compute the hunk header, moving the new side by fixoffset lines

        Diffutils manual, section "2.2.2.2 Detailed Description of Unified
        Format": "An empty hunk is considered to end at the line that
        precedes the hunk."  So the start of a side shifts by one whenever
        its length goes to or from zero.
        """
        original = self.hunk.header
        if self.newfile:
            fromline = 0
        else:
            fromline = original.old_start
        toline = original.new_start + fixoffset
        if original.new_count == 0:
            toline += 1
        if self.tolen == 0 and toline > 0:
            toline -= 1
        return HunkHeader(fromline, self.fromlen, toline, self.tolen,
                          original.section_heading)

    @staticmethod
    def writeline(fp: IO[str], line: DiffLine) -> None:
        fp.write('%s\n' % line.text)
        if line.no_trailing_newline:
            fp.write('%s\n' % NO_NEWLINE_MARKER)

    def write(self, fp: IO[str], fixoffset: int = 0) -> None:
        fp.write('%s\n' % self.header(fixoffset))
        for line in self.lines:
            self.writeline(fp, line)


def filterhunks(file: WorkingDirectoryFileChange, diff: Diff) -> list[tuple[FilteredHunk, int]]:
    """Filter every hunk of the diff by the file's selection

    Return the hunks which still change something, each paired with
    the offset to apply to its new side start, that is, the line count
    change of the earlier hunks which the selection left out.
    """
    newfile = file.status is FileStatus.NEW
    applied = []
    fixoffset = 0
    for hunk in diff.hunks:
        filtered = FilteredHunk(hunk, file.selection, newfile)
        if filtered.applied:
            applied.append((filtered, fixoffset))
        original = hunk.header.new_count - hunk.header.old_count
        fixoffset -= original - filtered.delta()
    return applied


def format_patch(file: WorkingDirectoryFileChange, diff: Diff) -> str:
    r"""Format a patch staging only the selected lines of the diff

    >>> from git_linestage.diffparser import parse_diff
    >>> from git_linestage.selection import DiffSelectionType
    >>> diff = parse_diff('''--- a/file.md
    ... +++ b/file.md
    ... @@ -10,2 +10,3 @@
    ...  context
    ... -removed line
    ... +added line 1
    ... +added line 2
    ... ''')
    >>> selection = DiffSelection.from_initial_selection(
    ...     DiffSelectionType.NONE).with_line_selection(3, True)
    >>> file = WorkingDirectoryFileChange('file.md', FileStatus.MODIFIED, selection)
    >>> print(format_patch(file, diff), end='')
    --- a/file.md
    +++ b/file.md
    @@ -10,2 +10,3 @@
     context
     removed line
    +added line 2
    """
    hunks = filterhunks(file, diff)
    if not hunks:
        raise EmptySelectionError(
            "no changes to %s are selected" % file.path)

    removes_file = (len(hunks) == len(diff.hunks) and
                    all(hunk.tolen == 0 for hunk, fixoffset in hunks))

    with io.StringIO() as fp:
        fp.write(format_patch_header(file, removes_file))
        for hunk, fixoffset in hunks:
            hunk.write(fp, fixoffset)
        return fp.getvalue()


def selected_lines(file: WorkingDirectoryFileChange, diff: Diff) -> Sequence[DiffLine]:
    """Return the changed lines of the diff which the selection includes"""
    return [line for hunk in diff.hunks
            for index, line in hunk.indexed_lines()
            if line.is_change and file.selection.is_selected(index)]
