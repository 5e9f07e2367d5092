from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from dbmreader.cache import PageStore
from dbmreader.models import CachedChapter, Page


def test_single_page_round_trip_uses_deterministic_name(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    path = store.save(Page(chapter=1, page_number=4, image_data=b"four"))

    assert path == tmp_path / "Chapters" / "Chapter_1" / "Page_4.jpg"
    assert not (path.parent / "metadata.json").exists()

    page = store.load(1, 4)
    assert page == Page(chapter=1, page_number=4, image_data=b"four")
    assert page.second_page_number is None


def test_double_page_round_trip_records_index(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    store.save(Page(chapter=3, page_number=8, second_page_number=9, image_data=b"spread"))

    chapter_dir = tmp_path / "Chapters" / "Chapter_3"
    assert (chapter_dir / "Page_8-9.jpg").read_bytes() == b"spread"
    index = json.loads((chapter_dir / "metadata.json").read_text(encoding="utf-8"))
    assert index == {"pages": [{"pageNumber": 8, "secondPageNumber": 9, "fileName": "Page_8-9.jpg"}]}

    page = store.load(3, 8)
    assert page is not None
    assert page.page_number == 8
    assert page.second_page_number == 9
    assert page.image_data == b"spread"


def test_index_accumulates_spreads(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    store.save(Page(chapter=3, page_number=8, second_page_number=9, image_data=b"a"))
    store.save(Page(chapter=3, page_number=20, second_page_number=21, image_data=b"b"))

    assert store.load(3, 8).image_data == b"a"
    assert store.load(3, 20).image_data == b"b"
    index = json.loads((tmp_path / "Chapters" / "Chapter_3" / "metadata.json").read_text(encoding="utf-8"))
    assert [e["pageNumber"] for e in index["pages"]] == [8, 20]


def test_missing_page_is_a_miss(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    assert store.load(1, 1) is None
    assert not store.has(1, 1)


def test_second_half_of_spread_is_not_served(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    store.save(Page(chapter=3, page_number=8, second_page_number=9, image_data=b"spread"))
    assert store.load(3, 9) is None


def test_corrupt_index_reads_as_empty_and_is_rewritten(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    chapter_dir = tmp_path / "Chapters" / "Chapter_5"
    chapter_dir.mkdir(parents=True)
    (chapter_dir / "Page_8-9.jpg").write_bytes(b"old")
    (chapter_dir / "metadata.json").write_text("{not json", encoding="utf-8")

    assert store.load(5, 8) is None

    store.save(Page(chapter=5, page_number=20, second_page_number=21, image_data=b"new"))
    index = json.loads((chapter_dir / "metadata.json").read_text(encoding="utf-8"))
    assert index["pages"] == [{"pageNumber": 20, "secondPageNumber": 21, "fileName": "Page_20-21.jpg"}]


def test_index_with_wrong_shape_reads_as_empty(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    chapter_dir = tmp_path / "Chapters" / "Chapter_5"
    chapter_dir.mkdir(parents=True)
    (chapter_dir / "Page_8-9.jpg").write_bytes(b"old")
    (chapter_dir / "metadata.json").write_text(json.dumps({"pages": "nope"}), encoding="utf-8")

    assert store.load(5, 8) is None


def test_index_entry_without_image_file_is_a_miss(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    chapter_dir = tmp_path / "Chapters" / "Chapter_2"
    chapter_dir.mkdir(parents=True)
    (chapter_dir / "metadata.json").write_text(
        json.dumps({"pages": [{"pageNumber": 8, "secondPageNumber": 9, "fileName": "Page_8-9.jpg"}]}),
        encoding="utf-8",
    )
    assert store.load(2, 8) is None


def test_save_surfaces_io_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocked"
    blocker.write_text("a file where the cache root should be", encoding="utf-8")
    store = PageStore(blocker)

    with pytest.raises(OSError):
        store.save(Page(chapter=1, page_number=1, image_data=b"x"))


def test_list_cached_chapters_counts_images(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    store.save(Page(chapter=10, page_number=1, image_data=b"x"))
    store.save(Page(chapter=2, page_number=1, image_data=b"x"))
    store.save(Page(chapter=2, page_number=2, image_data=b"x"))
    store.save(Page(chapter=2, page_number=8, second_page_number=9, image_data=b"x"))

    assert store.list_cached_chapters() == [
        CachedChapter(number="2", image_count=3),
        CachedChapter(number="10", image_count=1),
    ]
    stats = store.get_stats()
    assert stats["chapters"] == 2
    assert stats["images"] == 4


def test_clear_removes_everything_under_root(tmp_path: Path) -> None:
    root = tmp_path / "cache"
    store = PageStore(root)
    store.save(Page(chapter=1, page_number=1, image_data=b"x"))
    (root / "stray.txt").write_text("x", encoding="utf-8")

    store.clear()

    assert root.exists()
    assert list(root.iterdir()) == []
    assert store.load(1, 1) is None
    assert store.list_cached_chapters() == []


def test_interrupted_image_write_is_not_served(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = PageStore(tmp_path)
    real_write_bytes = Path.write_bytes

    def disk_full(self: Path, data: bytes) -> int:
        real_write_bytes(self, data[: len(data) // 2])
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(Path, "write_bytes", disk_full)
    with pytest.raises(OSError):
        store.save(Page(chapter=1, page_number=5, image_data=b"0123456789"))
    monkeypatch.undo()

    assert store.load(1, 5) is None
    assert list((tmp_path / "Chapters" / "Chapter_1").iterdir()) == []

    store.save(Page(chapter=1, page_number=5, image_data=b"0123456789"))
    assert store.load(1, 5).image_data == b"0123456789"


def test_concurrent_spread_saves_keep_every_index_entry(tmp_path: Path) -> None:
    store = PageStore(tmp_path)
    primaries = list(range(100, 140, 2))
    barrier = threading.Barrier(len(primaries))
    errors: list[BaseException] = []

    def save_spread(page: int) -> None:
        try:
            barrier.wait()
            store.save(Page(chapter=7, page_number=page, second_page_number=page + 1, image_data=f"{page}".encode()))
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=save_spread, args=(page,)) for page in primaries]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    index = json.loads((tmp_path / "Chapters" / "Chapter_7" / "metadata.json").read_text(encoding="utf-8"))
    assert sorted(e["pageNumber"] for e in index["pages"]) == primaries
    for page in primaries:
        loaded = store.load(7, page)
        assert loaded.second_page_number == page + 1
        assert loaded.image_data == f"{page}".encode()
