# Utility functions
#
#  Copyright 2006, 2015 Matt Mackall <mpm@selenic.com>
#  Copyright 2016, 2022 Andrej Shadura <andrew@shadura.me>
#  Copyright 2026 git-linestage contributors
#
# This software may be used and distributed according to the terms of the
# GNU General Public License version 2 or any later version
#
# Some of these utilities were originally taken from Mercurial.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

from gettext import gettext as _
import os
import subprocess
import sys
from codecs import register_error
from typing import Optional, Sequence


closefds = os.name == 'posix'


def hexreplace(err: UnicodeError) -> tuple[str, int]:
    r"""Replace undecodable bytes with their hexadecimal codes

    >>> b'caf\xe9'.decode('UTF-8', errors='hexreplace')
    'caf<E9>'
    """
    if not isinstance(err, UnicodeDecodeError):
        raise NotImplementedError("only decoding is supported")
    return "".join(
        "<%X>" % x for x in err.object[err.start:err.end]
    ), err.end


register_error("hexreplace", hexreplace)


def fromgit(data: bytes) -> str:
    r"""Decode git output so that any byte sequence survives a roundtrip

    >>> togit(fromgit(b'+\xcd\xce\n')) == b'+\xcd\xce\n'
    True
    """
    return data.decode("UTF-8", errors="surrogateescape")


def togit(text: str) -> bytes:
    return text.encode("UTF-8", errors="surrogateescape")


def printable(text: str) -> str:
    r"""Make text decoded with fromgit() safe to print

    >>> printable(fromgit(b'+\xcd\xce test'))
    '+<CD><CE> test'
    """
    return togit(text).decode("UTF-8", errors="hexreplace")


def explainexit(code):
    """return a 2-tuple (desc, code) describing a subprocess status
    (codes from kill are negative - not os.system/wait encoding)"""
    if (code < 0) and (os.name == 'posix'):
        return _("killed by signal %d") % -code, -code
    else:
        return _("exited with status %d") % code, code


class Abort(Exception):
    pass


def system(cmd, cwd=None, onerr=None, errprefix=None):
    try:
        sys.stdout.flush()
    except Exception:
        pass

    if isinstance(cmd, list):
        shell = False
        prog = os.path.basename(cmd[0])
    else:
        shell = True
        prog = os.path.basename(cmd.split(None, 1)[0])

    rc = subprocess.call(cmd, shell=shell, close_fds=closefds,
                         cwd=cwd)
    if rc and onerr:
        errmsg = '%s %s' % (prog,
                            explainexit(rc)[0])
        if errprefix:
            errmsg = '%s: %s' % (errprefix, errmsg)
        raise onerr(errmsg)
    return rc


def systemcall(
        cmd: Sequence[str],
        dir: Optional[os.PathLike | str] = None,
        input: Optional[bytes] = None,
        onerr=None,
        errprefix=None,
        okcodes: Sequence[int] = (0,),
) -> bytes:
    """Run a command and return its standard output as bytes

    Exit codes listed in okcodes are not treated as failures, which
    is needed for commands like "git diff --no-index" that exit with 1
    when they find differences.
    """
    try:
        sys.stdout.flush()
    except Exception:
        pass

    p = subprocess.Popen(
        cmd,
        cwd=dir,
        stdin=subprocess.PIPE if input is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE if onerr else None,
        close_fds=closefds,
    )
    out, err = p.communicate(input)
    rc = p.returncode

    if rc not in okcodes and onerr:
        errmsg = '%s %s' % (os.path.basename(cmd[0]),
                            explainexit(rc)[0])
        if err:
            errmsg = '%s: %s' % (errmsg, printable(fromgit(err)).rstrip('\n'))
        if errprefix:
            errmsg = '%s: %s' % (errprefix, errmsg)
        raise onerr(errmsg)

    return out


def unescape_filename(filename: str) -> str:
    r"""Unescape a filename after Git mangled it for "---"/"+++" lines.

    >>> unescape_filename('a/\\321\\216\\321\\217')
    'a/юя'
    >>> unescape_filename('a/\\\\')
    'a/\\'
    >>> unescape_filename('a/file\\55name')
    'a/file-name'
    """
    unescaped_unicode = togit(filename).decode('unicode_escape')
    return fromgit(bytes(ord(x) for x in unescaped_unicode))


def unwrap_filename(filename: str) -> str:
    r"""Unwrap a filename mangled by Git

    If the filename is in double quotes, remove them and unescape enclosed characters.
    Otherwise, return the input as is.

    >>> unwrap_filename('a/filename')
    'a/filename'
    >>> unwrap_filename('a/имя-файла')
    'a/имя-файла'
    >>> unwrap_filename('"a/file\\55name"')
    'a/file-name'
    >>> unwrap_filename('"a/им\\321\\217\\55\\\\name"')
    'a/имя-\\name'
    """
    if filename.startswith('"') and filename.endswith('"'):
        return unescape_filename(filename[1:-1])
    else:
        return filename


_cquote = {
    '\a': '\\a', '\b': '\\b', '\t': '\\t', '\n': '\\n',
    '\v': '\\v', '\f': '\\f', '\r': '\\r', '"': '\\"', '\\': '\\\\',
}


def wrap_filename(filename: str) -> str:
    r"""Quote a filename the way Git does with core.quotePath=false

    >>> print(wrap_filename('b/filename'))
    b/filename
    >>> print(wrap_filename('b/имя'))
    b/имя
    >>> print(wrap_filename('b/tab\tquote"'))
    "b/tab\tquote\""
    >>> print(wrap_filename('b/bell\x07\x7f'))
    "b/bell\a\177"
    """
    if not any(c in _cquote or c < ' ' or c == '\x7f' for c in filename):
        return filename
    quoted = ''.join(
        _cquote.get(c) or ('\\%03o' % ord(c) if c < ' ' or c == '\x7f' else c)
        for c in filename
    )
    return '"%s"' % quoted
