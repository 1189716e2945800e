"""
Mapping compiler and loader tests.
"""
import json

import pytest

from responsible_tool.engine import MappingConfig
from responsible_tool.rules.compile_mapping import compile_mapping, validate_row
from responsible_tool.rules.mapping_loader import MappingStore, load_mapping


def test_compile_writes_document(mapping_csv, tmp_path):
    output = tmp_path / "out" / "responsible_mapping.json"
    success, document, errors = compile_mapping(mapping_csv, output)

    assert success, errors
    assert document["default"] == 1
    assert document["byWeekday"] == {"1": 17, "5": 23}
    # inactive vip row is skipped
    assert document["byTag"] == {"wholesale": 31}
    assert document["total_rows"] == 7
    assert document["active_rows"] == 6

    on_disk = json.loads(output.read_text(encoding="utf-8"))
    assert on_disk["byCountryCode"] == {"CY": 23}


def test_compiled_document_loads_into_config(mapping_csv, tmp_path):
    output = tmp_path / "responsible_mapping.json"
    compile_mapping(mapping_csv, output)

    config = load_mapping(output)
    assert isinstance(config, MappingConfig)
    assert config.by_source["pos"] == 31


def test_missing_csv_fails(tmp_path):
    success, _, errors = compile_mapping(tmp_path / "nope.csv", tmp_path / "out.json")
    assert not success
    assert "not found" in errors[0]


def test_duplicate_active_rows_fail_and_write_nothing(tmp_path):
    csv_path = tmp_path / "m.csv"
    csv_path.write_text(
        "rule_type,match_value,responsible_id,active,notes\n"
        "tag,vip,1,true,\n"
        "tag,vip,2,true,\n",
        encoding="utf-8",
    )
    output = tmp_path / "m.json"
    success, _, errors = compile_mapping(csv_path, output)
    assert not success
    assert any("Duplicate" in e for e in errors)
    assert not output.exists()


def test_country_codes_are_upper_cased(tmp_path):
    csv_path = tmp_path / "m.csv"
    csv_path.write_text("rule_type,match_value,responsible_id\ncountry,cy,5\n", encoding="utf-8")
    success, document, _ = compile_mapping(csv_path, tmp_path / "m.json")
    assert success
    assert document["byCountryCode"] == {"CY": 5}


@pytest.mark.parametrize("row,message", [
    ({"rule_type": "region", "match_value": "EU", "responsible_id": "1"}, "invalid rule_type"),
    ({"rule_type": "weekday", "match_value": "7", "responsible_id": "1"}, "weekday must be 0"),
    ({"rule_type": "country", "match_value": "CYP", "responsible_id": "1"}, "two-letter"),
    ({"rule_type": "tag", "match_value": "", "responsible_id": "1"}, "match_value is required"),
    ({"rule_type": "default", "match_value": "x", "responsible_id": "1"}, "no match_value"),
    ({"rule_type": "source", "match_value": "pos", "responsible_id": ""}, "responsible_id is required"),
])
def test_validate_row_errors(row, message):
    parsed, errors = validate_row(row, line_num=3)
    assert parsed is None
    assert any(message in e for e in errors)
    assert all(e.startswith("Line 3:") for e in errors)


def test_non_numeric_identifiers_stay_text():
    parsed, errors = validate_row({"rule_type": "source", "match_value": "pos", "responsible_id": "user-7"}, 2)
    assert not errors
    assert parsed.responsible_id == "user-7"


class TestLoader:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_mapping(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_mapping(path)

    def test_store_loads_lazily_and_reloads(self, tmp_path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"default": 1}), encoding="utf-8")
        store = MappingStore(path)
        assert store.config.default_id == 1

        path.write_text(json.dumps({"default": 2}), encoding="utf-8")
        assert store.config.default_id == 1
        store.reload()
        assert store.config.default_id == 2

    def test_failed_reload_keeps_previous_config(self, tmp_path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"default": 1}), encoding="utf-8")
        store = MappingStore(path)
        store.reload()

        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            store.reload()
        assert store.config.default_id == 1


def test_shipped_mapping_compiles_and_matches_shipped_json(tmp_path):
    from responsible_tool.config.settings import get_data_dir

    data_dir = get_data_dir()
    success, document, errors = compile_mapping(data_dir / "responsible_mapping.csv", tmp_path / "m.json")
    assert success, errors

    shipped = load_mapping(data_dir / "responsible_mapping.json")
    assert MappingConfig.from_dict(document) == shipped


def test_try_reload_reports_error_and_keeps_config(tmp_path):
    path = tmp_path / "m.json"
    path.write_text(json.dumps({"default": 1}), encoding="utf-8")
    store = MappingStore(path)
    assert store.try_reload() is None

    path.write_text("{broken", encoding="utf-8")
    error = store.try_reload()
    assert "Invalid JSON" in error
    assert store.config.default_id == 1

    path.unlink()
    assert "not found" in store.try_reload()
    assert store.config.default_id == 1
