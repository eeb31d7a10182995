import asyncio
import json

import pytest

from rcm_dashboard.errors import ConfigInvalid, ConfigNotFound
from rcm_dashboard.loaders.client_config import (
    load_client_config,
    load_client_registry,
    parse_client_config,
)


def test_valid_document(config_doc):
    config = parse_client_config(config_doc("abc"), "abc")
    assert config.client_id == "abc"
    assert config.short_name == "Test"
    assert [k.formula_key for k in config.kpis] == [
        "countClaims", "grossCollectionRate", "denialRate", "firstPassRate",
    ]
    assert config.sections == ("kpiCards", "chargesByMonth", "denialsByReason")
    assert config.column_mapping == {}


def test_unknown_formula_key_reports_path(config_doc):
    doc = config_doc("abc")
    doc["kpis"][2]["formulaKey"] = "doesNotExist"
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(doc, "abc")
    assert exc.value.path == "kpis[2].formulaKey"
    assert "doesNotExist" in str(exc.value)


def test_unknown_section(config_doc):
    doc = config_doc("abc", layout={"sections": ["kpiCards", "pieOfEverything"]})
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(doc, "abc")
    assert exc.value.path == "layout.sections[1]"


def test_missing_required_field(config_doc):
    doc = config_doc("abc")
    del doc["shortName"]
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(doc, "abc")
    assert exc.value.path == "shortName"


def test_missing_kpi_label(config_doc):
    doc = config_doc("abc")
    del doc["kpis"][0]["label"]
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(doc, "abc")
    assert exc.value.path == "kpis[0].label"


def test_unknown_column_role(config_doc):
    doc = config_doc("abc", columnMapping={"chargeAmount": "Billed", "colour": "x"})
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(doc, "abc")
    assert exc.value.path == "columnMapping.colour"


def test_column_mapping_kept(config_doc):
    doc = config_doc("abc", columnMapping={"chargeAmount": "Billed"})
    config = parse_client_config(doc, "abc")
    assert config.column_mapping == {"chargeAmount": "Billed"}
    assert config.to_dict()["columnMapping"] == {"chargeAmount": "Billed"}


def test_client_id_mismatch(config_doc):
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(config_doc("other"), "abc")
    assert exc.value.path == "clientId"


def test_duplicate_kpi_keys(config_doc):
    doc = config_doc("abc")
    doc["kpis"][1]["key"] = "claims"
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(doc, "abc")
    assert exc.value.path == "kpis[1].key"


def test_not_an_object():
    with pytest.raises(ConfigInvalid) as exc:
        parse_client_config(["not", "a", "config"], "abc")
    assert exc.value.path == ""


def test_load_from_root(data_root):
    config = asyncio.run(load_client_config("test_clinic", str(data_root)))
    assert config.name == "Test Clinic"
    assert config.to_dict()["clientId"] == "test_clinic"


def test_load_unknown_client(data_root):
    with pytest.raises(ConfigNotFound):
        asyncio.run(load_client_config("nobody", str(data_root)))


def test_load_malformed_json(data_root):
    (data_root / "configs" / "broken.json").write_text("{not json")
    with pytest.raises(ConfigInvalid):
        asyncio.run(load_client_config("broken", str(data_root)))


def test_registry_order(data_root):
    (data_root / "clients.json").write_text(json.dumps([
        {"id": "z", "name": "Zeta", "shortName": "Z"},
        {"id": "a", "name": "Alpha", "shortName": "A"},
    ]))
    registry = asyncio.run(load_client_registry(str(data_root)))
    assert [c["id"] for c in registry] == ["z", "a"]


def test_registry_missing(tmp_path):
    assert asyncio.run(load_client_registry(str(tmp_path))) == []


@pytest.mark.parametrize("client_id", ["../x", "a/b", "..", "", "clinic.json"])
def test_client_id_cannot_escape_config_dir(data_root, config_doc, client_id):
    # configs/../x.json would otherwise load as a valid document
    (data_root / "x.json").write_text(json.dumps(config_doc("../x")))
    with pytest.raises(ConfigInvalid) as exc:
        asyncio.run(load_client_config(client_id, str(data_root)))
    assert exc.value.path == "clientId"


def test_registry_rejects_path_like_ids(data_root):
    (data_root / "clients.json").write_text(json.dumps([
        {"id": "../secrets", "name": "Bad", "shortName": "B"},
    ]))
    with pytest.raises(ConfigInvalid):
        asyncio.run(load_client_registry(str(data_root)))
