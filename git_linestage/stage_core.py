# Staging process driver
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

from gettext import gettext as _
import re
from typing import Sequence

from .diffparser import Diff, MalformedDiffError, parse_diff
from .gitrepo import GitRepo
from .patchformatter import format_patch, selected_lines
from .selection import DiffSelection, DiffSelectionType
from .status import WorkingDirectoryFileChange
from .util import Abort, printable

range_re = re.compile(r'^(\d+)(?:-(\d+))?$')


def parse_line_ranges(text: str) -> list[tuple[int, int]]:
    """Parse a list of line indices and inclusive ranges into (start, length) pairs

    >>> parse_line_ranges('3,5-9')
    [(3, 1), (5, 5)]
    >>> parse_line_ranges('0007, 10-10')
    [(7, 1), (10, 1)]
    >>> parse_line_ranges('9-5')
    Traceback (most recent call last):
        ...
    ValueError: invalid line range: '9-5'
    """
    ranges = []
    for item in text.split(','):
        m = range_re.match(item.strip())
        if not m:
            raise ValueError("invalid line range: %r" % item)
        start = int(m.group(1))
        end = int(m.group(2)) if m.group(2) is not None else start
        if end < start:
            raise ValueError("invalid line range: %r" % item)
        ranges.append((start, end - start + 1))
    return ranges


def buildselection(diff: Diff,
                   lines: Sequence[tuple[int, int]] = (),
                   hunks: Sequence[int] = (),
                   exclude: bool = False) -> DiffSelection:
    """Select the given line ranges and 1-based hunks of the diff

    With exclude, select everything except them instead.
    """
    if exclude:
        selection = DiffSelection.from_initial_selection(DiffSelectionType.ALL)
    else:
        selection = DiffSelection.from_initial_selection(DiffSelectionType.NONE)
    for start, length in lines:
        selection = selection.with_range_selection(start, length, not exclude)
    for number in hunks:
        if not 1 <= number <= len(diff.hunks):
            raise Abort(_("no hunk %d, the diff has %d hunks") % (number, len(diff.hunks)))
        hunk = diff.hunks[number - 1]
        selection = selection.with_range_selection(
            hunk.unified_diff_start,
            hunk.unified_diff_end - hunk.unified_diff_start,
            not exclude,
        )
    return selection


def showdiff(ui, diff: Diff) -> None:
    """Print the diff with every line prefixed by its index"""
    width = len(str(max(diff.line_count - 1, 0)))
    for number, hunk in enumerate(diff.hunks, 1):
        ui.status('%*s  %s' % (width, '#%d' % number, printable(str(hunk.header))))
        for index, line in hunk.indexed_lines():
            ui.status('%*d  %s' % (width, index, printable(line.text)))


def dostage(ui, repo: GitRepo, path: str, **opts) -> int:
    """Stage the selected lines of a file's working directory changes

    The file's diff against the index is parsed, filtered down to the
    lines selected by opts['lines'] and opts['hunks'] (or all but them
    with opts['exclude']), and the resulting patch is applied to the
    index, leaving the working directory as it is.
    """
    context = opts.get('unified')
    if context is None:
        context = ui.config.getint('linestage', 'unified', 3)

    filediff = repo.working_directory_diff(path, context)
    if not filediff:
        ui.status(_('no changes to stage'))
        return 0

    try:
        diff = parse_diff(filediff.text)
    except MalformedDiffError as inst:
        raise Abort(_("cannot parse the diff of %s: %s") % (path, inst))
    ui.debug('%r: %s' % (diff, filediff.status.name.lower()))

    if opts.get('list'):
        showdiff(ui, diff)
        return 0

    selection = buildselection(diff,
                               opts.get('lines') or (),
                               opts.get('hunks') or (),
                               opts.get('exclude', False))
    ui.debug('selection: %r' % selection)
    if selection.selection_type(diff.changed_line_indices()) is DiffSelectionType.NONE:
        ui.warn(_('the selected lines of %s contain no changes, see --list') % path)
        return 1

    file = WorkingDirectoryFileChange(path, filediff.status, selection)
    patch = format_patch(file, diff)
    ui.info(_('staging %d changed lines of %s') % (len(selected_lines(file, diff)), path))

    # optionally review / modify patch in text editor
    if opts.get('edit') or ui.config.getbool('linestage', 'reviewpatch', False):
        patch = ui.edit(patch)
        if not patch.strip():
            ui.status(_('empty patch, nothing staged'))
            return 1

    if opts.get('dry_run'):
        ui.write(patch)
        return 0

    if opts.get('confirm') or ui.config.getbool('linestage', 'confirm', False):
        ui.write(patch)
        if not ui.promptyesno(_('stage these changes?')):
            ui.status(_('nothing staged'))
            return 1

    ui.debug('applying patch')
    ui.debug(printable(patch))
    repo.apply_to_index(patch)
    return 0
