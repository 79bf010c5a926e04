from pathlib import Path

from sequencer.persistence.filesystem import FileStorage


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="optimization_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path / "outputs"


def test_file_storage_writes_json(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="optimization_test")

    summary_path = run_dir / "summary.json"
    storage.write_json(summary_path, {"hello": "world"})

    assert summary_path.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
