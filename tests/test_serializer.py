"""
Tests for the flow file format and file persistence.
"""

import json
import logging
import math

import pytest
from pydantic import ValidationError

from logicflow.engine.context import ExecutionContext
from logicflow.engine.errors import UnknownNodeTypeError
from logicflow.engine.reference import DataReference
from logicflow.engine.values import Vec3
from logicflow.tools import serializer
from logicflow.tools.serializer import dumps, load_file, loads, save_file


def _document(**overrides) -> str:
    data = {
        "name": "doc",
        "version": "1",
        "startNodeId": 1,
        "nodes": [
            {"id": 1, "type": "TriggerNode", "name": "E", "inputs": [], "nextNodes": [2]},
            {
                "id": 2,
                "type": "AdditionNode",
                "name": "A",
                "inputs": [
                    {"type": "reference", "id": 1, "index": 1},
                    {"type": "const", "value": "1.0"},
                ],
                "nextNodes": [-1],
            },
        ],
    }
    data.update(overrides)
    return json.dumps(data)


# ============================================================
# Document Tests
# ============================================================

class TestDocumentFormat:
    """Tests for the JSON document form."""

    def test_round_trip(self, addition_flow):
        """Test a saved flow loads back structurally equal."""
        addition_flow.get_node(2).inputs[1] = DataReference.constant(Vec3(1.0, 2.0, 3.0))
        loaded = loads(dumps(addition_flow))
        assert loaded.to_dict() == addition_flow.to_dict()
        assert loaded.start_node_id == 1

    def test_wire_keys(self, addition_flow):
        """Test field names and the stringified constant form."""
        data = json.loads(dumps(addition_flow))
        assert data["name"] == "addition"
        assert data["startNodeId"] == 1
        assert data["version"] == "1"
        assert "engine" in data

        start, add = data["nodes"]
        assert start["type"] == "TriggerNode"
        assert start["nextNodes"] == [2]
        assert add["inputs"][0] == {"type": "reference", "id": 1, "index": 0}
        assert add["inputs"][1] == {"type": "const", "value": "1.0"}

    def test_null_constant(self, addition_flow):
        """Test an empty input is written as the text null."""
        addition_flow.get_node(2).inputs[1] = DataReference.empty()
        data = json.loads(dumps(addition_flow))
        assert data["nodes"][1]["inputs"][1] == {"type": "const", "value": "null"}
        assert loads(dumps(addition_flow)).get_node(2).inputs[1] == DataReference.empty()

    def test_text_constants_are_sniffed(self, addition_flow):
        """Test text that looks like another kind loads as that kind."""
        addition_flow.get_node(2).inputs[0] = DataReference.constant("1.0")
        addition_flow.get_node(2).inputs[1] = DataReference.constant("yes")
        loaded = loads(dumps(addition_flow))
        assert loaded.get_node(2).inputs[0].value == 1.0
        assert loaded.get_node(2).inputs[1].value is True

    @pytest.mark.parametrize("text", ["Nan", "nan", "inf", "-inf", "infinity", "1_000", "0x10"])
    def test_number_like_text_stays_text(self, addition_flow, text):
        """Test words and digit groupings that are not plain decimals reload as text."""
        addition_flow.get_node(2).inputs[1] = DataReference.constant(text)
        loaded = loads(dumps(addition_flow))
        assert loaded.get_node(2).inputs[1].value == text

    def test_non_finite_numbers_round_trip(self, addition_flow):
        """Test infinities and NaN are written in a form that reloads as numbers."""
        addition_flow.get_node(2).inputs[0] = DataReference.constant(float("-inf"))
        addition_flow.get_node(2).inputs[1] = DataReference.constant(float("nan"))
        data = json.loads(dumps(addition_flow))
        assert data["nodes"][1]["inputs"][0]["value"] == "-Infinity"
        assert data["nodes"][1]["inputs"][1]["value"] == "NaN"

        loaded = loads(dumps(addition_flow))
        assert loaded.get_node(2).inputs[0].value == float("-inf")
        assert math.isnan(loaded.get_node(2).inputs[1].value)

    def test_loaded_flow_runs(self):
        """Test a document loads into a runnable flow."""
        flow = loads(_document())
        context = ExecutionContext(flow)
        assert context.execute(start_outputs=["console", 2.0]) is None
        assert context.get_status(2).outputs == [3.0]

    def test_non_string_constant(self):
        """Test a constant written as a JSON number is accepted."""
        text = _document()
        data = json.loads(text)
        data["nodes"][1]["inputs"][1]["value"] = 4
        flow = loads(json.dumps(data))
        assert flow.get_node(2).inputs[1].value == 4.0


# ============================================================
# Leniency Tests
# ============================================================

class TestLenientLoading:
    """Missing or surplus fields load with warnings."""

    def test_missing_name_and_inputs(self, caplog):
        """Test a node without a name or inputs gets defaults."""
        data = json.loads(_document())
        del data["nodes"][1]["name"]
        data["nodes"][1]["inputs"] = []
        with caplog.at_level(logging.WARNING):
            flow = loads(json.dumps(data))
        node = flow.get_node(2)
        assert node.name == "unnamed"
        assert node.inputs == [DataReference.empty(), DataReference.empty()]
        assert "has no name" in caplog.text
        assert "missing inputs are disconnected" in caplog.text

    def test_surplus_branches(self, caplog):
        """Test extra branches are dropped."""
        data = json.loads(_document())
        data["nodes"][1]["nextNodes"] = [-1, 1, 1]
        with caplog.at_level(logging.WARNING):
            flow = loads(json.dumps(data))
        assert flow.get_node(2).next_node_ids == [-1]
        assert "extra branches are ignored" in caplog.text

    def test_reference_without_index(self, caplog):
        """Test a reference without an index reads output 0."""
        data = json.loads(_document())
        del data["nodes"][1]["inputs"][0]["index"]
        with caplog.at_level(logging.WARNING):
            flow = loads(json.dumps(data))
        assert flow.get_node(2).inputs[0] == DataReference.node_output(1, 0)
        assert "without index" in caplog.text

    def test_unknown_input_type(self, caplog):
        """Test an unknown input kind is disconnected."""
        data = json.loads(_document())
        data["nodes"][1]["inputs"][0] = {"type": "magic"}
        with caplog.at_level(logging.WARNING):
            flow = loads(json.dumps(data))
        assert flow.get_node(2).inputs[0] == DataReference.empty()
        assert "unknown input type" in caplog.text

    def test_version_mismatch_warns(self, caplog):
        """Test other format versions still load."""
        with caplog.at_level(logging.WARNING):
            flow = loads(_document(version="0"))
        assert len(flow) == 2
        assert "format version" in caplog.text

    def test_missing_start_node_id(self, caplog):
        """Test a document without startNodeId has no start node."""
        data = json.loads(_document())
        del data["startNodeId"]
        with caplog.at_level(logging.WARNING):
            flow = loads(json.dumps(data))
        assert flow.start_node is None
        assert "no startNodeId" in caplog.text


# ============================================================
# Rejection Tests
# ============================================================

class TestRejectedDocuments:
    """Documents that cannot load as a whole."""

    def test_malformed_json(self):
        with pytest.raises(ValidationError):
            loads("{not json")

    def test_node_without_type(self):
        data = json.loads(_document())
        del data["nodes"][0]["type"]
        with pytest.raises(ValidationError):
            loads(json.dumps(data))

    def test_duplicate_ids(self):
        data = json.loads(_document())
        data["nodes"][1]["id"] = 1
        with pytest.raises(ValueError):
            loads(json.dumps(data))

    def test_unknown_node_type(self):
        """Test an unregistered type fails the whole load."""
        data = json.loads(_document())
        data["nodes"][1]["type"] = "NoSuchNode"
        with pytest.raises(UnknownNodeTypeError):
            loads(json.dumps(data))


# ============================================================
# File Tests
# ============================================================

class TestFiles:
    """Tests for save_file and load_file."""

    def test_save_and_load(self, tmp_path, addition_flow):
        path = tmp_path / "flows" / "addition.json"
        assert save_file(addition_flow, path) is True
        assert load_file(path).to_dict() == addition_flow.to_dict()

    def test_create_does_not_overwrite(self, tmp_path, addition_flow):
        """Test saving without replace keeps an existing file."""
        path = tmp_path / "addition.json"
        path.write_text("original", encoding="utf-8")
        assert save_file(addition_flow, path) is False
        assert path.read_text(encoding="utf-8") == "original"

    def test_replace_overwrites(self, tmp_path, addition_flow):
        path = tmp_path / "addition.json"
        path.write_text("original", encoding="utf-8")
        assert save_file(addition_flow, path, replace=True) is True
        assert load_file(path).name == "addition"
        assert not (tmp_path / "addition.json.tmp").exists()

    def test_failed_replace_keeps_original(self, tmp_path, addition_flow, monkeypatch):
        """Test a failure before the final move leaves the old file intact."""
        path = tmp_path / "addition.json"
        path.write_text("original", encoding="utf-8")

        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(serializer.os, "replace", fail)
        assert save_file(addition_flow, path, replace=True) is False
        assert path.read_text(encoding="utf-8") == "original"
        assert not (tmp_path / "addition.json.tmp").exists()

    def test_load_missing_file(self, tmp_path):
        assert load_file(tmp_path / "missing.json") is None

    def test_load_malformed_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"nodes": [{"id": -3}]}', encoding="utf-8")
        assert load_file(path) is None

    def test_load_unknown_type_raises(self, tmp_path):
        path = tmp_path / "unknown.json"
        data = json.loads(_document())
        data["nodes"][0]["type"] = "NoSuchEvent"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(UnknownNodeTypeError):
            load_file(path)
