import pytest

from ifacemaker.discovery import SourceDiscovery


@pytest.fixture
def src_dir(tmp_path):
    for name in ("b.go", "a.go", "a_test.go", "notes.txt"):
        (tmp_path / name).write_text("package p\n")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.go").write_text("package sub\n")
    return tmp_path


def test_directory_expands_to_sorted_go_files(src_dir):
    files = SourceDiscovery().expand([str(src_dir)])

    assert [f.name for f in files] == ["a.go", "a_test.go", "b.go"]


def test_exclude_patterns(src_dir):
    files = SourceDiscovery(exclude=["*_test.go"]).expand([str(src_dir)])

    assert [f.name for f in files] == ["a.go", "b.go"]


def test_files_are_taken_as_given(src_dir):
    files = SourceDiscovery().expand(
        [str(src_dir / "sub" / "c.go"), str(src_dir / "notes.txt"), str(src_dir)]
    )

    assert [f.name for f in files] == ["c.go", "notes.txt", "a.go", "a_test.go", "b.go"]


def test_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        SourceDiscovery().expand([str(tmp_path / "nope.go")])
