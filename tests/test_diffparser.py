from textwrap import dedent

import pytest

from git_linestage.diffparser import (
    DiffLine,
    DiffLineType,
    HunkHeader,
    MalformedDiffError,
    parse_diff,
)


def rawdiff(text: str) -> str:
    return dedent(text).lstrip('\n')


def test_parse_lines_and_numbers():
    diff = parse_diff(rawdiff(
        '''
        --- a/Dockerfile
        +++ b/Dockerfile
        @@ -1,3 +1,3 @@ FROM debian
         RUN apt-get update
        - && apt-get install -y supervisor python3.8
        + && apt-get install -y supervisor python3.9
             git python3-pip ssl-cert
        ''',
    ))

    assert diff.old_path == 'Dockerfile'
    assert diff.new_path == 'Dockerfile'
    assert len(diff.hunks) == 1

    hunk = diff.hunks[0]
    assert hunk.header == HunkHeader(1, 3, 1, 3, ' FROM debian')
    assert [line.kind for line in hunk.lines] == [
        DiffLineType.CONTEXT,
        DiffLineType.DELETION,
        DiffLineType.ADDITION,
        DiffLineType.CONTEXT,
    ]
    assert [(line.old_line_number, line.new_line_number) for line in hunk.lines] == [
        (1, 1), (2, None), (None, 2), (3, 3),
    ]
    assert hunk.lines[3].text == '     git python3-pip ssl-cert'
    assert hunk.lines[1].content == ' && apt-get install -y supervisor python3.8'


def test_absolute_indices_span_hunks():
    diff = parse_diff(rawdiff(
        '''
        --- a/file
        +++ b/file
        @@ -1,2 +1,3 @@
         1
        +1.5
         2
        @@ -10,2 +11 @@
         10
        -11
        ''',
    ))

    assert [(h.unified_diff_start, h.unified_diff_end) for h in diff.hunks] == [(0, 3), (3, 5)]
    assert diff.line_count == 5
    assert diff.line(1).text == '+1.5'
    assert diff.line(4).text == '-11'
    assert diff.changed_line_indices() == [1, 4]
    assert list(diff.hunks[1].indexed_lines())[0] == (3, diff.hunks[1].lines[0])
    with pytest.raises(IndexError):
        diff.line(5)


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        pytest.param('@@ -1 +1,2 @@', HunkHeader(1, 1, 1, 2), id="old count elided"),
        pytest.param('@@ -3,2 +3 @@', HunkHeader(3, 2, 3, 1), id="new count elided"),
        pytest.param('@@ -3,2 +3,2 @@def f():', HunkHeader(3, 2, 3, 2, 'def f():'), id="heading without space"),
    ],
)
def test_hunk_header_counts(header, expected):
    lines = {
        HunkHeader(1, 1, 1, 2): [' a', '+b'],
        HunkHeader(3, 2, 3, 1): [' a', '-b'],
        HunkHeader(3, 2, 3, 2, 'def f():'): [' a', '-b', '+c'],
    }[expected]
    diff = parse_diff('\n'.join(['--- a/f', '+++ b/f', header] + lines))
    assert diff.hunks[0].header == expected


def test_no_trailing_newline_is_optional():
    text = '--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b'
    assert parse_diff(text) == parse_diff(text + '\n')


def test_crlf_is_kept_in_line_text():
    diff = parse_diff('--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\r\n+b\r\n')
    assert [line.text for line in diff.hunks[0].lines] == ['-a\r', '+b\r']


def test_no_newline_marker():
    diff = parse_diff(rawdiff(
        '''
        --- a/f
        +++ b/f
        @@ -1,2 +1,2 @@
         a
        -b
        \\ No newline at end of file
        +b
        ''',
    ))

    lines = diff.hunks[0].lines
    assert len(lines) == 3
    assert lines[1].no_trailing_newline
    assert not lines[2].no_trailing_newline
    assert diff.line_count == 3


def test_created_file_ignores_old_count():
    diff = parse_diff('\n'.join([
        '--- /dev/null',
        '+++ b/file.md',
        '@@ -0,2 +1,2 @@',
        '+added line 1',
        '+added line 2',
    ]))

    assert diff.is_new_file
    assert diff.old_path is None
    assert diff.hunks[0].header == HunkHeader(0, 0, 1, 2)
    assert [line.new_line_number for line in diff.hunks[0].lines] == [1, 2]


def test_deleted_file():
    diff = parse_diff('\n'.join([
        '--- a/file.md',
        '+++ /dev/null',
        '@@ -1,2 +0,0 @@',
        '-line 1',
        '-line 2',
    ]))

    assert diff.is_deleted_file
    assert diff.changed_line_indices() == [0, 1]


def test_quoted_file_names():
    diff = parse_diff('\n'.join([
        '--- "a/\\321\\216\\321\\217 file"\t',
        '+++ "b/\\321\\216\\321\\217 file"\t',
        '@@ -1 +1 @@',
        '-a',
        '+b',
    ]))

    assert diff.old_path == diff.new_path == 'юя file'


@pytest.mark.parametrize(
    "text",
    [
        pytest.param('', id="empty"),
        pytest.param('@@ -1 +1 @@\n-a\n+b\n', id="no file header"),
        pytest.param('+++ b/f\n--- a/f\n@@ -1 +1 @@\n-a\n+b\n', id="swapped file header"),
        pytest.param('--- a/f\n+++ b/f\n', id="no hunks"),
        pytest.param('--- a/f\n+++ b/f\n-a\n+b\n', id="no hunk header"),
        pytest.param('--- a/f\n+++ b/f\n@@ -1,a +1 @@\n-a\n+b\n', id="bad hunk header"),
        pytest.param('--- a/f\n+++ b/f\n@@ -1,2 +1,2 @@\n-a\n+b\n', id="hunk too short"),
        pytest.param('--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\n+c\n', id="hunk too long"),
        pytest.param('--- a/f\n+++ b/f\n@@ -1,2 +1,2 @@\n-a\n\n+b\n', id="blank line inside hunk"),
        pytest.param('--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\ngarbage\n', id="trailing garbage"),
        pytest.param('--- /dev/null\n+++ b/f\n@@ -0,0 +1 @@\n a\n', id="context in created file"),
        pytest.param('--- a/f\n+++ b/f\n@@ -1 +1 @@\n\\ No newline at end of file\n-a\n+b\n', id="stray marker"),
    ],
)
def test_malformed(text):
    with pytest.raises(MalformedDiffError):
        parse_diff(text)


def test_malformed_error_names_line():
    with pytest.raises(MalformedDiffError, match=r'^line 5: '):
        parse_diff('--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\ngarbage\n')


def test_diff_line_needs_a_line_number():
    with pytest.raises(ValueError):
        DiffLine(DiffLineType.CONTEXT, ' a', None, None)


def test_values_are_immutable():
    diff = parse_diff('--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\n')
    with pytest.raises(AttributeError):
        diff.hunks[0].lines[0].text = '-c'
