# tools/convert_furni.py
import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.diagnostics import JsonlDiagnosticsSink  # noqa: E402
from src.pipeline.offset import build_offset  # noqa: E402
from src.pipeline.snapshot import offset_to_payload  # noqa: E402

XML_PARTS = ("assets", "logic", "visualization", "index")


def list_folder_assets(folder: Path) -> list[str]:
    return sorted(path.name for path in folder.iterdir() if path.is_file())


def read_xml_parts(source_dir: Path, name: str) -> dict[str, str]:
    parts: dict[str, str] = {}
    for part in XML_PARTS:
        path = source_dir / f"{name}_{part}.xml"
        parts[part] = path.read_text(encoding="utf-8") if path.exists() else ""
    return parts


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Convert furni XML files into furni.json")
    parser.add_argument("source_dir", type=Path, help="directory holding <name>_<part>.xml files")
    parser.add_argument("--name", default="", help="file stem, defaults to the directory name")
    parser.add_argument("--assets-dir", type=Path, default=None, help="folder listing source")
    parser.add_argument("--out", type=Path, default=None, help="output JSON path (stdout otherwise)")
    parser.add_argument("--diag-jsonl", default="", help="append diagnostics events to this file")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    source_dir: Path = args.source_dir
    name = args.name or source_dir.name
    parts = read_xml_parts(source_dir, name)
    folder_assets = list_folder_assets(args.assets_dir or source_dir)
    diag = JsonlDiagnosticsSink(args.diag_jsonl) if args.diag_jsonl else None

    result = build_offset(
        parts["assets"],
        parts["logic"],
        parts["visualization"],
        parts["index"],
        folder_assets,
        diag=diag,
    )
    if not result.ok:
        failure = result.failure
        print(f"CONVERSION FAILED: {failure.component} {failure.kind.value} {failure.path}".rstrip(), file=sys.stderr)
        if failure.reason:
            print(failure.reason, file=sys.stderr)
        return 1

    text = json.dumps(offset_to_payload(result.value), ensure_ascii=False, indent=2) + "\n"
    if args.out is None:
        sys.stdout.write(text)
    else:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text, encoding="utf-8")
        print(f"wrote {args.out}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
