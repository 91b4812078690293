import pytest

from mztab_validator.io.files import atomic_rewrite, read_dataset_id


def test_atomic_rewrite_replaces_file(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("old\n", encoding="utf-8")
    with atomic_rewrite(path) as handle:
        handle.write("new\n")
    assert path.read_text(encoding="utf-8") == "new\n"
    assert list(tmp_path.iterdir()) == [path]


def test_atomic_rewrite_discard_keeps_original(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("old\n", encoding="utf-8")
    with atomic_rewrite(path, discard=True) as handle:
        handle.write("new\n")
    assert path.read_text(encoding="utf-8") == "old\n"
    assert list(tmp_path.iterdir()) == [path]


def test_atomic_rewrite_error_keeps_original(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("old\n", encoding="utf-8")
    with pytest.raises(RuntimeError):
        with atomic_rewrite(path) as handle:
            handle.write("partial")
            raise RuntimeError("boom")
    assert path.read_text(encoding="utf-8") == "old\n"
    assert list(tmp_path.iterdir()) == [path]


def test_read_dataset_id_literal_and_file(tmp_path):
    assert read_dataset_id(None) is None
    assert read_dataset_id("  ") is None
    assert read_dataset_id("MSV000000001") == "MSV000000001"

    dataset_file = tmp_path / "dataset.txt"
    dataset_file.write_text("\nMSV000000002\nignored\n", encoding="utf-8")
    assert read_dataset_id(dataset_file) == "MSV000000002"


def test_read_dataset_id_empty_file(tmp_path):
    dataset_file = tmp_path / "dataset.txt"
    dataset_file.write_text("\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_dataset_id(dataset_file)
