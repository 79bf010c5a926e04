from pathlib import Path

import pytest
from openpyxl import Workbook

from sequencer.data.matrix_repository import load_matrix_entries
from sequencer.models.domain import AttributeConfig, MatrixEntry, Order
from sequencer.services.matrix import (
    collect_values_by_attribute,
    matrix_data_from_entries,
    prefetch_matrix_data,
    select_matrix_entries,
)


@pytest.fixture(autouse=True)
def clear_matrix_cache():
    load_matrix_entries.cache_clear()
    yield
    load_matrix_entries.cache_clear()


def _write_csv(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_matrix_entries_from_csv(tmp_path: Path):
    source = _write_csv(
        tmp_path / "matrix.csv",
        "Attribute,FromValue,ToValue,Minutes,Source\n"
        "Color,Red,White,25,smed_standard\n"
        "Color,White,Red,8,\n"
        ",Orphan,Row,3,\n"
        "Size,S,L,not-a-number,\n",
    )

    entries = load_matrix_entries(source)

    assert [entry.key for entry in entries] == [("Color", "Red", "White"), ("Color", "White", "Red")]
    assert entries[0].minutes == 25
    assert entries[0].source == "smed_standard"
    assert entries[1].source == "imported"


def test_load_matrix_entries_from_workbook(tmp_path: Path):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Attribute", "FromValue", "ToValue", "Minutes", "Notes"])
    sheet.append(["Material", "Steel", "Aluminum", 5, "purge only"])
    source = tmp_path / "matrix.xlsx"
    workbook.save(source)

    entries = load_matrix_entries(source)

    assert len(entries) == 1
    assert entries[0].key == ("Material", "Steel", "Aluminum")
    assert entries[0].minutes == 5
    assert entries[0].notes == "purge only"


def test_load_matrix_entries_rejects_missing_columns(tmp_path: Path):
    source = _write_csv(tmp_path / "matrix.csv", "Attribute,FromValue,Minutes\nColor,Red,5\n")

    with pytest.raises(ValueError, match="ToValue"):
        load_matrix_entries(source)


def test_load_matrix_entries_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_matrix_entries(tmp_path / "absent.csv")


def test_collect_values_by_attribute():
    orders = [
        Order(order_id="1", original_index=0, values={"Color": "Red", "Size": "S"}),
        Order(order_id="2", original_index=1, values={"Color": "Blue"}),
    ]
    attributes = [AttributeConfig(column="Color", changeover_time=10), AttributeConfig(column="Size", changeover_time=5)]

    values = collect_values_by_attribute(orders, attributes)

    assert values == {"Color": {"Red", "Blue"}, "Size": {"S", ""}}


def test_prefetch_keeps_only_observed_values():
    entries = [
        MatrixEntry(attribute="Color", from_value="Red", to_value="Blue", minutes=12),
        MatrixEntry(attribute="Color", from_value="Red", to_value="Green", minutes=40),
        MatrixEntry(attribute="Size", from_value="S", to_value="L", minutes=4),
        MatrixEntry(attribute="Tool", from_value="T1", to_value="T2", minutes=9),
    ]

    data = prefetch_matrix_data(
        ["Color", "Size"],
        {"Color": ["Red", "Blue"], "Size": ["S", "L"], "Tool": ["T1", "T2"]},
        entries,
    )

    assert data == {("Color", "Red", "Blue"): 12, ("Size", "S", "L"): 4}


def test_prefetch_reads_configured_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    from sequencer.config import settings

    source = _write_csv(tmp_path / "matrix.csv", "Attribute,FromValue,ToValue,Minutes\nColor,Red,Blue,7\n")
    monkeypatch.setattr(settings, "matrix_file", source)

    data = prefetch_matrix_data(["Color"], {"Color": {"Red", "Blue"}})

    assert data == {("Color", "Red", "Blue"): 7}


def test_matrix_data_from_entries_last_duplicate_wins():
    entries = [
        MatrixEntry(attribute="Color", from_value="Red", to_value="Blue", minutes=12),
        MatrixEntry(attribute="Color", from_value="Red", to_value="Blue", minutes=9),
        MatrixEntry(attribute="Color", from_value="Blue", to_value="Red", minutes=float("nan")),
    ]

    assert matrix_data_from_entries(entries) == {("Color", "Red", "Blue"): 9}
    assert select_matrix_entries(entries, ["Size"], {"Size": ["S"]}) == []
