# File change status
#
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .selection import DiffSelection


class FileStatus(enum.Enum):
    """How a file changed, named by git's one-letter change types"""
    NEW = 'A'
    MODIFIED = 'M'
    DELETED = 'D'
    RENAMED = 'R'


@dataclass(frozen=True)
class WorkingDirectoryFileChange:
    path: str
    status: FileStatus
    selection: DiffSelection
    # the path before a rename
    old_path: Optional[str] = None
