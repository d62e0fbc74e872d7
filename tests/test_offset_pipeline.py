from __future__ import annotations

import io
import json
import os
import sys
from contextlib import redirect_stdout
from pathlib import Path

import pytest
from pydantic import ValidationError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.extractors.result import FailureKind
from src.pipeline.offset import build_offset, generate_offset_from_xml
from src.pipeline.snapshot import offset_to_payload
from src.schema import FurniOffset

FIXTURE_DIR = ROOT / "data" / "examples" / "chair"
GOLDEN_PATH = ROOT / "tests" / "golden" / "chair.furni.json"
FOLDER_ASSETS = ["chair_icon_a.png", "chair_64_a_2_0.png", "chair_32_a_2_0.png"]
PARTS = ("assets", "logic", "visualization", "index")


class ListDiagnosticsSink:
    def __init__(self) -> None:
        self.events = []

    def emit(self, event) -> None:
        self.events.append(event)


def _load_parts() -> dict:
    return {part: (FIXTURE_DIR / f"chair_{part}.xml").read_text(encoding="utf-8") for part in PARTS}


def _convert(parts: dict, folder_assets=FOLDER_ASSETS):
    return generate_offset_from_xml(
        parts["assets"],
        parts["logic"],
        parts["visualization"],
        parts["index"],
        folder_assets,
        diag=ListDiagnosticsSink(),
    )


def _update_golden_enabled() -> bool:
    value = os.environ.get("UPDATE_GOLDEN", "")
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def test_chair_fixture_converts():
    offset = _convert(_load_parts())
    assert isinstance(offset, FurniOffset)
    assert sorted(offset.visualization.by_size()) == [1, 32, 64]
    assert offset.logic.directions == [2, 4]
    assert offset.index.logic == "furniture_multistate"
    assert offset.assets["chair_64_a_2_0"].exists is True
    assert offset.assets["chair_64_a_4_0"].exists is False


def test_chair_payload_matches_golden():
    payload = offset_to_payload(_convert(_load_parts()))
    if _update_golden_enabled():
        GOLDEN_PATH.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        return

    assert GOLDEN_PATH.exists(), f"Golden payload not found: {GOLDEN_PATH}. Run with UPDATE_GOLDEN=1 to generate."
    expected = json.loads(GOLDEN_PATH.read_text(encoding="utf-8"))
    assert payload == expected
    assert json.loads(json.dumps(payload)) == payload
    assert json.dumps(payload, sort_keys=True) == json.dumps(expected, sort_keys=True)


def test_payload_omits_small_slot_when_absent():
    parts = _load_parts()
    parts["visualization"] = (
        "<visualizationData><graphics>"
        '<visualization size="1" layerCount="1" angle="45"/>'
        '<visualization size="64" layerCount="1" angle="45"/>'
        "</graphics></visualizationData>"
    )
    payload = offset_to_payload(_convert(parts))
    assert sorted(payload["visualization"]) == ["1", "64"]


@pytest.mark.parametrize("broken_part", PARTS)
def test_any_malformed_input_fails_the_whole_conversion(broken_part):
    parts = _load_parts()
    parts[broken_part] = "<broken"
    assert _convert(parts) is None


@pytest.mark.parametrize("broken_part", PARTS)
def test_failure_reason_names_the_component(broken_part):
    parts = _load_parts()
    parts[broken_part] = ""
    result = build_offset(
        parts["assets"],
        parts["logic"],
        parts["visualization"],
        parts["index"],
        FOLDER_ASSETS,
        diag=ListDiagnosticsSink(),
    )
    assert not result.ok
    assert result.value is None
    assert result.failure.component == broken_part
    assert result.failure.kind == FailureKind.parse_failure


def test_first_failure_in_component_order_is_reported():
    parts = _load_parts()
    parts["index"] = "<wrong/>"
    parts["logic"] = "<objectData/>"
    result = build_offset(
        parts["assets"],
        parts["logic"],
        parts["visualization"],
        parts["index"],
        FOLDER_ASSETS,
        diag=ListDiagnosticsSink(),
    )
    assert result.failure.component == "logic"


def test_conversion_is_idempotent():
    parts = _load_parts()
    first = _convert(parts)
    second = _convert(parts)
    assert first == second
    assert first is not second
    assert offset_to_payload(first) == offset_to_payload(second)


def test_folder_listing_order_does_not_matter():
    parts = _load_parts()
    assert _convert(parts, list(reversed(FOLDER_ASSETS))) == _convert(parts, FOLDER_ASSETS)


def test_offset_is_immutable():
    offset = _convert(_load_parts())
    with pytest.raises(ValidationError):
        offset.logic = None


def test_pipeline_is_stdout_silent():
    buf = io.StringIO()
    with redirect_stdout(buf):
        assert _convert(_load_parts()) is not None
        assert _convert({part: "" for part in PARTS}) is None
    assert buf.getvalue() == ""


def test_default_sink_comes_from_env(monkeypatch, tmp_path):
    out_path = tmp_path / "diag" / "events.jsonl"
    monkeypatch.setenv("FURNI_DIAG_JSONL", str(out_path))
    parts = _load_parts()
    offset = generate_offset_from_xml(
        parts["assets"], parts["logic"], parts["visualization"], parts["index"], FOLDER_ASSETS
    )
    assert offset is not None
    lines = out_path.read_text(encoding="utf-8").splitlines()
    codes = [json.loads(line)["code"] for line in lines]
    assert codes == ["OFFSET_START", "ASSETS_MISSING", "OFFSET_DONE"]
    assert json.loads(lines[1])["resolved_value"] == ["chair_64_a_4_0", "chair_64_sd_2_0"]


def test_default_sink_is_noop_without_env(monkeypatch, tmp_path):
    monkeypatch.delenv("FURNI_DIAG_JSONL", raising=False)
    monkeypatch.chdir(tmp_path)
    parts = _load_parts()
    assert generate_offset_from_xml(
        parts["assets"], parts["logic"], parts["visualization"], parts["index"], FOLDER_ASSETS
    ) is not None
    assert list(tmp_path.iterdir()) == []
