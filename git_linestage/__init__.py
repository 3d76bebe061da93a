# git-linestage
#
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later

'''selective staging of changed lines'''
from .diffparser import (
    Diff,
    DiffLine,
    DiffLineType,
    DiffParser,
    Hunk,
    HunkHeader,
    MalformedDiffError,
    PatchError,
    parse_diff,
)
from .patchformatter import EmptySelectionError, format_patch
from .selection import DiffSelection, DiffSelectionType
from .status import FileStatus, WorkingDirectoryFileChange

__all__ = [
    'Diff', 'DiffLine', 'DiffLineType', 'DiffParser', 'Hunk', 'HunkHeader',
    'MalformedDiffError', 'PatchError', 'parse_diff',
    'EmptySelectionError', 'format_patch',
    'DiffSelection', 'DiffSelectionType',
    'FileStatus', 'WorkingDirectoryFileChange',
]
