import pytest

from pinshare.services.catalog import Catalog
from pinshare.services.records import FileRecord


def _rec(name, size=1):
    return FileRecord(name, size, f"uploads/{name}")


def test_list_all_keeps_insertion_order():
    catalog = Catalog()
    for name in ["c.txt", "a.txt", "b.txt"]:
        catalog.insert(_rec(name))
    assert [r.filename for r in catalog.list_all()] == ["c.txt", "a.txt", "b.txt"]


def test_find_and_remove():
    catalog = Catalog([_rec("a.txt"), _rec("b.txt", 7)])
    assert catalog.find_by_name("b.txt").size == 7
    assert catalog.find_by_name("B.txt") is None

    removed = catalog.remove_by_name("a.txt")
    assert removed.filename == "a.txt"
    assert catalog.remove_by_name("a.txt") is None
    assert "a.txt" not in catalog
    assert len(catalog) == 1


def test_insert_rejects_duplicate_name():
    catalog = Catalog([_rec("a.txt")])
    with pytest.raises(ValueError):
        catalog.insert(_rec("a.txt", 2))


def test_list_all_is_a_copy():
    catalog = Catalog([_rec("a.txt")])
    snapshot = catalog.list_all()
    catalog.insert(_rec("b.txt"))
    assert len(snapshot) == 1
