import shutil

import pytest

from git_linestage.util import system


@pytest.fixture
def empty_git_repo(tmp_path, monkeypatch):
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    for command in [
        ["git", "init", "-q"],
        ["git", "config", "user.name", "Committer Name"],
        ["git", "config", "user.email", "name@example.org"],
        ["git", "config", "commit.gpgsign", "false"],
        ["git", "config", "core.autocrlf", "false"],
    ]:
        system(command, cwd=tmp_path)

    assert (tmp_path / '.git').is_dir()
    monkeypatch.chdir(tmp_path)
    # keep the user's configuration out of the tests
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))
    yield tmp_path


@pytest.fixture
def lorem_text() -> list[str]:
    return [
        "Lorem ipsum dolor sit amet, consectetur adipiscing elit.\n",
        "Cras mi urna, ullamcorper sit amet tellus eget.\n",
        "Congue ornare leo. Donec dapibus sem quis sem.\n",
        "Commodo, id ultricies ligula varius.\n",
        "Vestibulum ante ipsum primis in faucibus.\n",
        "\n",
        "Aliquam leo ipsum, laoreet sed libero at.\n",
        "Mollis pulvinar arcu. Nullam porttitor.\n",
        "Nisl eget hendrerit vestibulum.\n",
        "Curabitur ornare id neque ac tristique.\n",
    ]
