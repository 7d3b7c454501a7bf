from __future__ import annotations

import pytest

from satchel.table import ModuleRecord, ModuleTable, TableError, ambient


def _noop(require, module, exports):
    pass


def test_table_accepts_pairs_records_and_bare_factories() -> None:
    record = ModuleRecord("c", _noop, {"./d": "d"})

    table = ModuleTable({"a": (_noop, {"./b": "b"}), "b": _noop, "c": record, "d": [_noop, None]})

    assert sorted(table) == ["a", "b", "c", "d"]
    assert table["a"].aliases == {"./b": "b"}
    assert table["b"].aliases == {}
    assert table["c"] is record
    assert table["d"].aliases == {}


def test_alias_maps_are_read_only() -> None:
    table = ModuleTable({"a": (_noop, {"./b": "b"})})

    with pytest.raises(TypeError):
        table["a"].aliases["./c"] = "c"  # type: ignore[index]


def test_canonical_name_lookup() -> None:
    record = ModuleRecord("a", _noop, {"./b": "b", "fs": None})

    assert record.canonical("./b") == "b"
    assert record.canonical("fs") == "fs"
    assert record.canonical("lodash") == "lodash"


def test_ambient_decorator_records_handles() -> None:
    @ambient("nested", "table")
    def factory(require, module, exports, *, nested, table):  # pragma: no cover - not invoked
        pass

    record = ModuleRecord("a", factory)

    assert factory._ambient == ["nested", "table"]
    assert record.ambient == ("nested", "table")


@pytest.mark.parametrize(
    "records, expected_message",
    [
        ({"a": "not callable"}, "must be a ModuleRecord"),
        ({"a": ("nope", {})}, "not callable"),
        ({"a": (_noop, ["./b"])}, "must be a mapping"),
        ({1: (_noop, {})}, "must be strings"),
        ({"a": ModuleRecord("b", _noop)}, "registered under 'a'"),
        ({"a": ambient("sys")(lambda r, m, e, **kw: None)}, "unknown ambient handles"),
    ],
)
def test_invalid_tables_are_rejected(records, expected_message) -> None:
    with pytest.raises(TableError, match=expected_message):
        ModuleTable(records)


def test_of_returns_existing_tables_unchanged() -> None:
    table = ModuleTable({"a": _noop})

    assert ModuleTable.of(table) is table
    assert isinstance(ModuleTable.of({"a": _noop}), ModuleTable)
