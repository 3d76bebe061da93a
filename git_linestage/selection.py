# Line selection model
#
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

import enum
from typing import Iterable


class DiffSelectionType(enum.Enum):
    ALL = 'all'
    NONE = 'none'
    PARTIAL = 'partial'


class DiffSelection:
    r"""Which lines of a diff are selected, by absolute line index

    A selection is a default state plus the set of lines whose state
    differs from it.  It is a value: every update returns a new selection
    and leaves the original alone.

    >>> s = DiffSelection.from_initial_selection(DiffSelectionType.NONE)
    >>> t = s.with_range_selection(3, 4, True).with_line_selection(5, False)
    >>> [i for i in range(10) if t.is_selected(i)]
    [3, 4, 6]
    >>> s.is_selected(3)
    False
    >>> t.selection_type([3, 4, 6])
    <DiffSelectionType.ALL: 'all'>
    >>> t.selection_type(range(10))
    <DiffSelectionType.PARTIAL: 'partial'>

    Negative indices never refer to a line:
    >>> DiffSelection.from_initial_selection(DiffSelectionType.ALL).is_selected(-1)
    False
    """

    __slots__ = ('_default', '_diverging')

    def __init__(self, default: bool, diverging: Iterable[int] = ()):
        self._default = default
        self._diverging = frozenset(diverging)

    @classmethod
    def from_initial_selection(cls, kind: DiffSelectionType) -> DiffSelection:
        if kind is DiffSelectionType.PARTIAL:
            raise ValueError("a selection can only start as all or none selected")
        return cls(kind is DiffSelectionType.ALL)

    @property
    def default_selection_type(self) -> DiffSelectionType:
        return DiffSelectionType.ALL if self._default else DiffSelectionType.NONE

    def is_selected(self, index: int) -> bool:
        if index < 0:
            return False
        return self._default != (index in self._diverging)

    def with_line_selection(self, index: int, included: bool) -> DiffSelection:
        return self.with_range_selection(index, 1, included)

    def with_range_selection(self, start: int, length: int, included: bool) -> DiffSelection:
        if length < 0:
            raise ValueError("selection range length must not be negative, got %d" % length)
        indices = range(max(start, 0), max(start + length, 0))
        if included == self._default:
            diverging = self._diverging.difference(indices)
        else:
            diverging = self._diverging.union(indices)
        return DiffSelection(self._default, diverging)

    def with_select_all(self) -> DiffSelection:
        return DiffSelection(True)

    def with_select_none(self) -> DiffSelection:
        return DiffSelection(False)

    def selection_type(self, indices: Iterable[int]) -> DiffSelectionType:
        """Classify the selection over the given selectable lines"""
        selected = [self.is_selected(i) for i in indices]
        if all(selected):
            return DiffSelectionType.ALL
        if not any(selected):
            return DiffSelectionType.NONE
        return DiffSelectionType.PARTIAL

    def __eq__(self, other):
        if not isinstance(other, DiffSelection):
            return NotImplemented
        return self._default == other._default and self._diverging == other._diverging

    def __hash__(self):
        return hash((self._default, self._diverging))

    def __repr__(self) -> str:
        return '<selection %s except %r>' % (
            self.default_selection_type.value, sorted(self._diverging))
