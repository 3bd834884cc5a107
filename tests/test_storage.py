import pytest

from access_stats.services.storage import LogStore


def test_read_lines_strips_newlines_and_skips_blanks(tmp_path):
    path = tmp_path / "access.log"
    path.write_bytes(b"first\r\n\n   \nsecond\nthird")

    assert list(LogStore(str(path)).read_lines()) == ["first", "second", "third"]


def test_read_lines_replaces_undecodable_bytes(tmp_path):
    path = tmp_path / "access.log"
    path.write_bytes(b"caf\xe9\n")

    assert list(LogStore(str(path)).read_lines()) == ["caf\ufffd"]


def test_missing_file_raises(tmp_path):
    store = LogStore(str(tmp_path / "nope.log"))
    with pytest.raises(FileNotFoundError):
        list(store.read_lines())


def test_save_upload_overwrites_and_counts_lines(tmp_path):
    store = LogStore(str(tmp_path / "nested" / "access.log"))
    store.save_upload(b"old\n")

    saved = store.save_upload(b"a\n\nb\n")

    assert saved["written"] == 2
    assert list(store.read_lines()) == ["a", "b"]


@pytest.mark.parametrize("content", [b"", b"  \n\n"])
def test_save_upload_rejects_empty_content(tmp_path, content):
    store = LogStore(str(tmp_path / "access.log"))
    with pytest.raises(ValueError):
        store.save_upload(content)
    assert not store.exists()


def test_stat(tmp_path, scenario_log):
    health = LogStore(str(scenario_log)).stat()
    assert health.log_file_exists
    assert health.total_lines == 3
    assert health.size_bytes == scenario_log.stat().st_size

    missing = LogStore(str(tmp_path / "missing.log")).stat()
    assert not missing.log_file_exists
    assert missing.total_lines == 0
    assert missing.size_bytes == 0
