"""
공통 테스트 픽스처

GitPython 으로 날짜가 고정된 커밋을 만들어 테스트용 저장소를 구성합니다.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from git import Actor, Repo

# 프로젝트 소스를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from repo_stats.utils.config import StatsConfig


ALICE = Actor("Alice Kim", "alice@example.com")
BOB = Actor("Bob Lee", "bob@example.com")
CAROL = Actor("Carol Park", "carol@example.com")
DAVE = Actor("Dave Choi", "dave@example.com")
TRIS = Actor("Tristan", "tris.git@shoddynet.org")
MORGAN = Actor("Morgan", "morgan@example.com")


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def commit(repo: Repo, message: str, actor: Actor, when: datetime, **kwargs):
    """작성자와 커미터 날짜를 고정해 커밋"""
    return repo.index.commit(
        message,
        author=actor,
        committer=actor,
        author_date=when,
        commit_date=when,
        **kwargs,
    )


def write_and_add(repo: Repo, name: str, text: str) -> None:
    path = Path(repo.working_tree_dir) / name
    path.write_text(text)
    repo.index.add([str(path)])


@pytest.fixture
def test_config():
    return StatsConfig(termination_grace=1.0, poll_interval=0.02)


@pytest.fixture(scope="session")
def repo1_bare(tmp_path_factory):
    """
    3명의 작성자, 10개 커밋으로 된 bare 저장소

    작성자별 커밋 수는 5 / 3 (tris.git@shoddynet.org) / 2 이고,
    추가 10줄, 삭제 1줄입니다.
    """
    base = tmp_path_factory.mktemp("repo1")
    work = Repo.init(str(base / "work"))

    authors = [ALICE, TRIS, ALICE, MORGAN, TRIS, ALICE, ALICE, MORGAN, TRIS, ALICE]
    lines = []
    for i, actor in enumerate(authors):
        if i == len(authors) - 1:
            lines[0] = "line 0 (edited)"
        else:
            lines.append(f"line {i}")
        write_and_add(work, "README.md", "\n".join(lines) + "\n")
        commit(work, f"commit {i}", actor, utc(2016, 3, 1, 12) + timedelta(days=i))

    work.git.branch("-M", "master")
    bare = Repo.clone_from(str(base / "work"), str(base / "repo1_bare"), bare=True)
    bare.close()
    work.close()
    return str(base / "repo1_bare")


@pytest.fixture
def branched_repo(tmp_path):
    """
    브랜치와 머지 커밋이 있는 저장소

    master: c1(Alice, +2) - c2(Bob, +1) - c5(Bob, feature 머지)
    feature: c2 - c3(Carol, +1) - c4(Carol, 빈 커밋)
    other:   c1 - c6(Dave, +1)
    """
    repo = Repo.init(str(tmp_path / "branched"))

    write_and_add(repo, "a.txt", "one\ntwo\n")
    c1 = commit(repo, "c1", ALICE, utc(2020, 1, 1, 12))
    write_and_add(repo, "a.txt", "one\ntwo\nthree\n")
    c2 = commit(repo, "c2", BOB, utc(2020, 1, 2, 12))
    repo.git.branch("-M", "master")

    feature = repo.create_head("feature", c2)
    feature.checkout()
    write_and_add(repo, "b.txt", "feature\n")
    commit(repo, "c3", CAROL, utc(2020, 1, 3, 12))
    c4 = commit(repo, "c4 (empty)", CAROL, utc(2020, 1, 4, 12))

    repo.heads.master.checkout()
    write_and_add(repo, "b.txt", "feature\n")
    commit(
        repo, "Merge branch 'feature'", BOB, utc(2020, 1, 5, 12),
        parent_commits=[c2, c4],
    )

    other = repo.create_head("other", c1)
    other.checkout()
    write_and_add(repo, "c.txt", "other\n")
    commit(repo, "c6", DAVE, utc(2020, 1, 6, 12))
    repo.heads.master.checkout()

    yield str(tmp_path / "branched")
    repo.close()
