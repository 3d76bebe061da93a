# git-linestage entry point and configuration helpers
#
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from gettext import gettext as _
from pathlib import Path
from typing import Optional

import argparse
import os
import sys
import tempfile

from . import stage_core
from .diffparser import PatchError
from .gitrepo import GitRepo
from .util import Abort, fromgit, system, systemcall, togit


class Config:
    def get(self, section, item, default=None, type=None) -> Optional[str]:
        cmd = ['git', 'config']
        if type:
            cmd.append('--type=%s' % type)
        try:
            return fromgit(systemcall(
                cmd + ['--get', '%s.%s' % (section, item)],
                onerr=KeyError,
            )).rstrip('\n')
        except KeyError:
            return default

    def getbool(self, section, item, default=False) -> bool:
        value = self.get(section, item, type='bool')
        if value is None:
            return default
        return value == 'true'

    def getint(self, section, item, default=None) -> Optional[int]:
        value = self.get(section, item, type='int')
        if value is None:
            return default
        return int(value)


class Ui:
    def __init__(self):
        self.config = Config()
        self.debuglevel = 0

    def print_message(self, *msg, debuglevel: int, **opts):
        if self.debuglevel < debuglevel:
            return

        sys.stdout.flush()
        print(*msg, **opts, file=sys.stderr)
        sys.stderr.flush()

    def debug(self, *msg, **opts):
        self.print_message(*msg, debuglevel=2, **opts)

    def info(self, *msg, **opts):
        self.print_message(*msg, debuglevel=1, **opts)

    def warn(self, *msg, **opts):
        self.print_message(*msg, debuglevel=0, **opts)

    def status(self, *msg, **opts):
        print(*msg, **opts)

    def write(self, text: str):
        sys.stdout.flush()
        sys.stdout.buffer.write(togit(text))
        sys.stdout.flush()

    def setdebuglevel(self, level):
        self.debuglevel = level

    def promptyesno(self, msg: str) -> bool:
        while True:
            try:
                answer = input('%s [y/n] ' % msg)
            except EOFError:
                return False
            if answer.lower() in ('y', 'yes'):
                return True
            if answer.lower() in ('n', 'no', 'q'):
                return False

    @property
    def editor(self) -> str:
        return (os.environ.get("GIT_EDITOR") or
                self.config.get("core", "editor") or
                os.environ.get("VISUAL") or
                os.environ.get("EDITOR") or
                'sensible-editor')

    def edit(self, text: str) -> str:
        f = tempfile.NamedTemporaryFile(
            prefix='git-linestage-',
            suffix=".diff",
            mode="wb",
            delete=False,
        )
        try:
            f.write(togit(text))
            f.close()

            editor = self.editor

            system("%s \"%s\"" % (editor, f.name),
                   onerr=Abort, errprefix=_("edit failed"))

            t = fromgit(Path(f.name).read_bytes())

        finally:
            os.unlink(f.name)

        return t


def lineranges(value: str):
    try:
        return stage_core.parse_line_ranges(value)
    except ValueError as inst:
        raise argparse.ArgumentTypeError(str(inst))


def main(argv=None):
    prog = os.path.basename(sys.argv[0]).replace('-', ' ').replace('.py', '')

    parser = argparse.ArgumentParser(description='stage selected lines of a changed file', prog=prog)
    parser.add_argument('path', help='file to stage changes of')
    parser.add_argument('lines', metavar='RANGES', nargs='*', type=lineranges,
                        help='line indices or ranges to stage, like 3,5-9, as numbered by --list')
    parser.add_argument('-l', '--list', action='store_true', default=False, help='show the diff with line indices and exit')
    parser.add_argument('-H', '--hunk', dest='hunks', metavar='N', type=int, action='append', default=[], help='stage the whole N-th hunk')
    parser.add_argument('-x', '--exclude', action='store_true', default=False, help='stage every change except the selected ones')
    parser.add_argument('-n', '--dry-run', action='store_true', default=False, help='print the patch instead of staging it')
    parser.add_argument('-e', '--edit', action='store_true', default=False, help='review the patch in an editor before staging it')
    parser.add_argument('--confirm', default=False, action='store_true', help='show confirmation prompt before staging')
    parser.add_argument('-U', '--unified', metavar='N', type=int, default=None, help='generate diffs with N lines of context')
    parser.add_argument('-v', '--verbose', default=0, action='count', help='be more verbose')
    parser.add_argument('--debug', action='store_const', const=2, dest='verbose', help='be debuggingly verbose')
    args = parser.parse_intermixed_args(argv)

    opts = vars(args)
    opts['lines'] = [r for ranges in opts['lines'] for r in ranges]

    if not (opts['lines'] or opts['hunks'] or opts['list'] or opts['exclude']):
        parser.error(_("nothing selected, give line ranges, --hunk or --list"))

    repo = GitRepo(".")
    ui = Ui()
    ui.setdebuglevel(opts['verbose'])

    # git wants paths relative to the top of the work tree
    path = os.path.relpath(os.path.realpath(opts.pop('path')),
                           os.path.realpath(repo.path))
    os.chdir(repo.path)

    try:
        return stage_core.dostage(ui, repo, path, **opts)
    except (Abort, PatchError) as inst:
        sys.stderr.write(_("abort: %s\n") % inst)
        return 1


if __name__ == '__main__':
    sys.exit(main())
