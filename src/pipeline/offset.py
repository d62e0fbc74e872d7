"""Join the four extractor results into one FurniOffset."""

from __future__ import annotations

import os
import uuid
from typing import Optional, Sequence

from src.diagnostics import DiagnosticsSink, Severity, emit_simple
from src.extractors import extract_assets, extract_index, extract_logic, extract_visualization
from src.extractors.result import ExtractFailure, ExtractResult, FailureKind
from src.schema import FurniOffset


def _diag_sink_from_env() -> DiagnosticsSink:
    # Diagnostics are opt-in: JSONL sink only when FURNI_DIAG_JSONL is set.
    from src.diagnostics import JsonlDiagnosticsSink, NoopDiagnosticsSink

    path = os.environ.get("FURNI_DIAG_JSONL", "")
    if isinstance(path, str) and path.strip():
        return JsonlDiagnosticsSink(path.strip())
    return NoopDiagnosticsSink()


def _report_failure(sink: DiagnosticsSink, run_id: str, failure: ExtractFailure) -> None:
    emit_simple(
        sink,
        run_id=run_id,
        stage="parse" if failure.kind == FailureKind.parse_failure else "extract",
        component=failure.component,
        code="EXTRACT_FAILED",
        severity=Severity.ERROR,
        path=failure.path,
        source="xml",
        reason=failure.reason,
        kind=failure.kind.value,
    )


def build_offset(
    assets_xml: str,
    logic_xml: str,
    visualization_xml: str,
    index_xml: str,
    folder_assets: Sequence[str],
    *,
    diag: Optional[DiagnosticsSink] = None,
    run_id: str = "",
) -> ExtractResult[FurniOffset]:
    """Run all four extractors; succeed only when every one succeeds.

    On failure the result carries the first failing component's failure, in
    the order assets, logic, visualization, index.
    """
    sink = diag if diag is not None else _diag_sink_from_env()
    run_id = run_id or uuid.uuid4().hex
    folder_assets = list(folder_assets)
    emit_simple(
        sink,
        run_id=run_id,
        code="OFFSET_START",
        reason="furni offset conversion start",
        source="folder",
        input_value={"folder_assets": len(folder_assets)},
    )

    assets = extract_assets(assets_xml, folder_assets)
    logic = extract_logic(logic_xml)
    visualization = extract_visualization(visualization_xml)
    index = extract_index(index_xml)

    failures = [result.failure for result in (assets, logic, visualization, index) if not result.ok]
    for failure in failures:
        _report_failure(sink, run_id, failure)
    if failures:
        emit_simple(
            sink,
            run_id=run_id,
            code="OFFSET_DONE",
            severity=Severity.ERROR,
            reason="furni offset conversion failed",
            resolved_value={"ok": False, "failed": [failure.component for failure in failures]},
        )
        return ExtractResult(failure=failures[0])

    offset = FurniOffset(
        assets=assets.value,
        logic=logic.value,
        visualization=visualization.value,
        index=index.value,
    )
    missing = sorted(name for name, asset in offset.assets.items() if not asset.exists)
    if missing:
        emit_simple(
            sink,
            run_id=run_id,
            stage="extract",
            component="assets",
            code="ASSETS_MISSING",
            severity=Severity.WARN,
            path="assets",
            source="folder",
            resolved_value=missing,
            reason="assets without a matching file in the folder listing",
        )
    if offset.visualization.small is None:
        emit_simple(
            sink,
            run_id=run_id,
            stage="select",
            component="visualization",
            code="VISUALIZATION_SMALL_ABSENT",
            path="visualization.32",
            source="xml",
            reason="no size 32 variant in source",
        )
    emit_simple(
        sink,
        run_id=run_id,
        code="OFFSET_DONE",
        reason="furni offset conversion done",
        resolved_value={
            "ok": True,
            "assets": len(offset.assets),
            "sizes": list(offset.visualization.by_size()),
        },
    )
    return ExtractResult.success(offset)


def generate_offset_from_xml(
    assets_xml: str,
    logic_xml: str,
    visualization_xml: str,
    index_xml: str,
    folder_assets: Sequence[str],
    *,
    diag: Optional[DiagnosticsSink] = None,
) -> Optional[FurniOffset]:
    """Build the FurniOffset, or None when any of the four inputs fails."""
    return build_offset(
        assets_xml,
        logic_xml,
        visualization_xml,
        index_xml,
        folder_assets,
        diag=diag,
    ).unwrap_or_none()
