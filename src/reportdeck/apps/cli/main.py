from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
from pathlib import Path
from typing import Any

from reportdeck.core.errors import ConfigLoadError
from reportdeck.core.export import export_presentation
from reportdeck.core.preview import generate_all_previews
from reportdeck.core.template import TemplateConfigStore, resolve_template_path, set_default_store
from reportdeck.core.utils.schema_validate import schema_path, validate_against


def _schema_paths() -> dict[str, Path]:
    return {
        "template": schema_path("template"),
        "report": schema_path("report"),
    }


def _load_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


def _load_report(path: Path) -> dict[str, Any]:
    """Read a report JSON; accepts the bare report or a {"result": report} envelope."""
    obj = _load_json(path)
    if isinstance(obj, dict) and isinstance(obj.get("result"), dict):
        obj = obj["result"]
    if not isinstance(obj, dict):
        raise TypeError(f"expected report at {path} to be a JSON object")
    return obj


def _read_report(path: Path) -> dict[str, Any] | None:
    try:
        return _load_report(path)
    except (ValueError, TypeError):
        print(f"[NG] report is not a JSON object: {path}")
        return None


def _use_config(config: str | None) -> TemplateConfigStore:
    store = TemplateConfigStore(config)
    set_default_store(store)
    return store


def _print_issues(errs: list[str], limit: int = 30) -> None:
    for m in errs[:limit]:
        print(f"  - {m}")
    if len(errs) > limit:
        print(f"  ... ({len(errs)} errors)")


def cmd_paths(args: argparse.Namespace) -> int:
    print(f"template_config: {resolve_template_path(args.config)}")
    for k, v in _schema_paths().items():
        print(f"schema.{k}: {v}")
    return 0


def cmd_check_template(args: argparse.Namespace) -> int:
    store = _use_config(args.config)
    try:
        config = store.load()
    except ConfigLoadError as e:
        print(f"[NG] template config: {store.path}")
        _print_issues(e.issues)
        return 2

    print(f"[OK] template config: {store.path}")
    print(f"  colors={len(config['colors'])} fonts={len(config['fonts'])} slideTypes={len(config['slideTypes'])}")
    for key in store.missing_slide_types:
        print(f"  [WARN] missing slide type: {key}")
    return 0


def cmd_validate_report(args: argparse.Namespace) -> int:
    in_path = Path(args.report).resolve()
    if not in_path.exists():
        print(f"[NG] report not found: {in_path}")
        return 2
    report = _read_report(in_path)
    if report is None:
        return 2
    errs = validate_against("report", report)
    if errs:
        print(f"[NG] {in_path.as_posix()}")
        _print_issues(errs)
        return 2
    print(f"[OK] {in_path.as_posix()}")
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    in_path = Path(args.report).resolve()
    out_dir = Path(args.out).resolve()
    if not in_path.exists():
        print(f"[NG] report not found: {in_path}")
        return 2

    store = _use_config(args.config)
    try:
        # renderers swallow per-slide errors, so surface a broken config here
        store.load()
    except ConfigLoadError as e:
        print(f"[NG] template config: {store.path}")
        _print_issues(e.issues)
        return 2

    report = _read_report(in_path)
    if report is None:
        return 2
    batch = asyncio.run(
        generate_all_previews(report, one_per_type=not args.all_types, max_previews=args.max)
    )

    out_dir.mkdir(parents=True, exist_ok=True)
    for p in batch.previews:
        name = f"slide_{p.slide_index:02d}_{p.slide_type}.png"
        (out_dir / name).write_bytes(base64.b64decode(p.image_data))

    summary = batch.to_dict(include_image=False)
    summary["reportTitle"] = report.get("title")
    (out_dir / "previews.json").write_text(json.dumps(summary, ensure_ascii=False, indent=2), encoding="utf-8")

    meta = batch.metadata
    print(f"[OK] previews: {meta['previewedSlides']}/{meta['totalSlides']} -> {out_dir}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    in_path = Path(args.report).resolve()
    out_path = Path(args.out).resolve()
    if not in_path.exists():
        print(f"[NG] report not found: {in_path}")
        return 2

    report = _read_report(in_path)
    if report is None:
        return 2
    _use_config(args.config)
    try:
        asyncio.run(export_presentation(report, out_path))
    except ConfigLoadError as e:
        print("[NG] template config could not be loaded")
        _print_issues(e.issues)
        return 2
    except ValueError as e:
        print(f"[NG] {e}: {in_path}")
        return 2
    print(f"[OK] exported: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reportdeck")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_paths = sub.add_parser("paths", help="show template config and schema paths")
    p_paths.add_argument("--config", help="template config JSON (default: $REPORTDECK_TEMPLATE_CONFIG or packaged)")
    p_paths.set_defaults(func=cmd_paths)

    p_chk = sub.add_parser("check-template", help="load and validate the template config")
    p_chk.add_argument("--config", help="template config JSON")
    p_chk.set_defaults(func=cmd_check_template)

    p_val = sub.add_parser("validate-report", help="validate a report JSON against the report schema")
    p_val.add_argument("report", help="path to report JSON")
    p_val.set_defaults(func=cmd_validate_report)

    p_prev = sub.add_parser("preview", help="render PNG previews for a report")
    p_prev.add_argument("report", help="path to report JSON")
    p_prev.add_argument("--out", required=True, help="output directory")
    p_prev.add_argument("--all-types", action="store_true", help="do not limit to one preview per section type")
    p_prev.add_argument("--max", type=int, default=10, help="maximum number of previews (default: 10)")
    p_prev.add_argument("--config", help="template config JSON")
    p_prev.set_defaults(func=cmd_preview)

    p_exp = sub.add_parser("export", help="export a report to .pptx")
    p_exp.add_argument("report", help="path to report JSON")
    p_exp.add_argument("--out", required=True, help="output .pptx path")
    p_exp.add_argument("--config", help="template config JSON")
    p_exp.set_defaults(func=cmd_export)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
