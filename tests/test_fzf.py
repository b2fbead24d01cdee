from types import SimpleNamespace

import pytest

import gpssplit.util.fzf as fzf
from gpssplit.errors import FzfNotFoundError, SelectionError


@pytest.fixture
def work_root(tmp_path):
    root = tmp_path / "work"
    for rel in ("2024/05-01/Current.gpx", "2024/05-02/Current.gpx", "notes.txt"):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("<gpx/>", encoding="utf-8")
    return root


@pytest.fixture
def fzf_on_path(monkeypatch):
    monkeypatch.setattr(fzf, "which", lambda _cmd: "/usr/bin/fzf")


def _fake_fzf(monkeypatch, *, returncode=0, stdout="", stderr=""):
    calls = []

    def fake_run(cmd, *, input, capture_output, text):
        calls.append((cmd, input))
        return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)

    monkeypatch.setattr(fzf.subprocess, "run", fake_run)
    return calls


def test_find_gpx_files(work_root, tmp_path):
    found = fzf.find_gpx_files(work_root)

    assert [p.relative_to(work_root).as_posix() for p in found] == [
        "2024/05-01/Current.gpx",
        "2024/05-02/Current.gpx",
    ]
    assert fzf.find_gpx_files(tmp_path / "missing") == []


def test_selection_shows_relative_paths_and_returns_absolute(monkeypatch, work_root, fzf_on_path):
    second = (work_root / "2024/05-02/Current.gpx").resolve()
    calls = _fake_fzf(monkeypatch, stdout=f"2024/05-02/Current.gpx\t{second}\n")

    picked = fzf.select_gpx_files(work_root)

    assert picked == [second]
    cmd, sent = calls[0]
    assert cmd[0] == "fzf" and "--multi" in cmd
    assert [line.split("\t")[0] for line in sent.splitlines()] == [
        "2024/05-01/Current.gpx",
        "2024/05-02/Current.gpx",
    ]


def test_single_selection_mode(monkeypatch, work_root, fzf_on_path):
    calls = _fake_fzf(monkeypatch)

    fzf.select_gpx_files(work_root, multi=False)

    assert "--multi" not in calls[0][0]


def test_nothing_to_select(tmp_path, fzf_on_path):
    (tmp_path / "empty").mkdir()
    with pytest.raises(SelectionError, match="No GPX files found"):
        fzf.select_gpx_files(tmp_path / "empty")


def test_missing_fzf(monkeypatch, work_root):
    monkeypatch.setattr(fzf, "which", lambda _cmd: None)
    with pytest.raises(FzfNotFoundError):
        fzf.select_gpx_files(work_root)


@pytest.mark.parametrize("returncode", [1, 130])
def test_aborted_selection(monkeypatch, work_root, fzf_on_path, returncode):
    _fake_fzf(monkeypatch, returncode=returncode)
    assert fzf.select_gpx_files(work_root) == []


def test_fzf_failure(monkeypatch, work_root, fzf_on_path):
    _fake_fzf(monkeypatch, returncode=2, stderr="unknown option\n")
    with pytest.raises(SelectionError, match="unknown option"):
        fzf.select_gpx_files(work_root)
