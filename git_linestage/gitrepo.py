# Git wrapper for reading diffs and updating the index
#
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

from gettext import gettext as _
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from . import util
from .status import FileStatus

# options making "git diff" output stable whatever the user's configuration:
#  - core.quotePath: limit symbols requiring escaping to double-quotes,
#    backslash and control characters;
#  - diff.mnemonicPrefix: our parser only supports "a/" and "b/"
GIT_DIFF = ["git", "-c", "core.quotePath=false", "-c", "diff.mnemonicPrefix=false",
            "diff", "--no-color", "--no-ext-diff", "--no-renames"]


@dataclass(frozen=True)
class FileDiff:
    """One file's diff as produced by git

    text holds the unified diff proper, starting with the "---" line,
    and header the extended header lines git puts before it.
    """
    path: str
    status: FileStatus
    text: str
    header: Sequence[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.text)


binary_re = re.compile(r'(?:GIT binary patch|Binary files .* differ)')


def splitheader(text: str) -> tuple[list[str], str]:
    r"""Split git's extended header lines from the unified diff

    >>> splitheader('diff --git a/f b/f\nindex 1234..5678 100644\n--- a/f\n+++ b/f\n')
    (['diff --git a/f b/f', 'index 1234..5678 100644'], '--- a/f\n+++ b/f\n')
    >>> splitheader('')
    ([], '')
    """
    header: list[str] = []
    rest = text
    while rest and not rest.startswith('--- '):
        line, _sep, rest = rest.partition('\n')
        header.append(line)
    return header, rest


def changetype(header: Sequence[str]) -> FileStatus:
    """Work out the change type from git's extended header lines"""
    for line in header:
        if binary_re.match(line):
            raise util.Abort(_("binary files are not supported"))
    status = FileStatus.MODIFIED
    for line in header:
        if line.startswith('new file'):
            status = FileStatus.NEW
        elif line.startswith('deleted file'):
            status = FileStatus.DELETED
    return status


class GitRepo:
    def __init__(self, path: os.PathLike | str | None):
        try:
            self.path = Path(os.fsdecode(util.systemcall(
                ['git', 'rev-parse', '--show-toplevel'],
                dir=path,
                onerr=util.Abort
            )).rstrip('\n'))
        except util.Abort as inst:
            sys.stderr.write(_("abort: %s\n") % inst)
            sys.exit(1)

    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__, self.path)

    def is_untracked(self, path: str) -> bool:
        out = util.systemcall(
            ['git', 'ls-files', '--others', '--exclude-standard', '-z', '--', path],
            dir=self.path,
            onerr=util.Abort,
            errprefix=_("listing untracked files failed"),
        )
        return bool(out)

    def working_directory_diff(self, path: str, context: int = 3) -> FileDiff:
        """Return the diff of a file in the working directory against the index"""
        unified = '-U%d' % context
        if self.is_untracked(path):
            cmd = GIT_DIFF + [unified, '--no-index', '--', os.devnull, path]
            # git diff --no-index exits with 1 when the files differ
            out = util.systemcall(cmd, dir=self.path, onerr=util.Abort,
                                  errprefix=_("diff failed"), okcodes=(0, 1))
        else:
            cmd = GIT_DIFF + [unified, '--', path]
            out = util.systemcall(cmd, dir=self.path, onerr=util.Abort,
                                  errprefix=_("diff failed"))
        header, text = splitheader(util.fromgit(out))
        status = changetype(header)
        if not text and header:
            # mode-only changes have nothing to select lines from
            header, text = [], ''
        return FileDiff(path, status, text, header)

    def apply_to_index(self, patch: str) -> None:
        util.systemcall(
            ['git', 'apply', '--cached', '--whitespace=nowarn', '-'],
            dir=self.path,
            input=util.togit(patch),
            onerr=util.Abort,
            errprefix=_("patch failed to apply"),
        )

    def staged_diff(self, path: str, context: int = 3) -> str:
        """Return the diff of a file in the index against HEAD"""
        out = util.systemcall(
            GIT_DIFF + ['-U%d' % context, '--cached', '--', path],
            dir=self.path,
            onerr=util.Abort,
            errprefix=_("diff failed"),
        )
        return splitheader(util.fromgit(out))[1]
