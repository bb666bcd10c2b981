import io
import json

import pytest
from pptx import Presentation

from reportdeck.apps.cli.main import build_parser, main


@pytest.fixture
def report_file(tmp_path, full_report):
    path = tmp_path / "report.json"
    path.write_text(json.dumps({"result": full_report}), encoding="utf-8")
    return path


@pytest.fixture
def broken_config(tmp_path):
    path = tmp_path / "template.json"
    path.write_text(json.dumps({"colors": {}, "fonts": {}}), encoding="utf-8")
    return path


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_paths(capsys):
    assert main(["paths"]) == 0
    out = capsys.readouterr().out
    assert "default_template.json" in out
    assert "schema.report:" in out


def test_check_template_ok(capsys):
    assert main(["check-template"]) == 0
    assert "[OK] template config" in capsys.readouterr().out


def test_check_template_broken(capsys, broken_config):
    assert main(["check-template", "--config", str(broken_config)]) == 2
    out = capsys.readouterr().out
    assert "[NG]" in out
    assert "slideTypes" in out


def test_validate_report(capsys, report_file, tmp_path):
    assert main(["validate-report", str(report_file)]) == 0

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"sections": [{"title": "no type"}]}), encoding="utf-8")
    assert main(["validate-report", str(bad)]) == 2
    assert "_type" in capsys.readouterr().out

    assert main(["validate-report", str(tmp_path / "missing.json")]) == 2


def test_preview_writes_pngs_and_summary(report_file, tmp_path):
    out_dir = tmp_path / "previews"
    assert main(["preview", str(report_file), "--out", str(out_dir)]) == 0

    summary = json.loads((out_dir / "previews.json").read_text(encoding="utf-8"))
    assert summary["reportTitle"] == "Global Market Outlook"
    assert summary["metadata"]["totalSlides"] == 7
    assert summary["metadata"]["previewedSlides"] == 6
    assert [p["slideIndex"] for p in summary["previews"]] == [0, 1, 3, 4, 5, 6]
    assert "imageData" not in summary["previews"][0]
    assert (out_dir / "slide_01_contentSection.png").read_bytes().startswith(b"\x89PNG")


def test_preview_all_types_with_cap(report_file, tmp_path):
    out_dir = tmp_path / "previews"
    assert main(["preview", str(report_file), "--out", str(out_dir), "--all-types", "--max", "3"]) == 0
    summary = json.loads((out_dir / "previews.json").read_text(encoding="utf-8"))
    assert [p["sectionNumber"] for p in summary["previews"]] == [None, 1, 2]


def test_preview_broken_config(report_file, broken_config, tmp_path):
    out_dir = tmp_path / "previews"
    assert main(["preview", str(report_file), "--out", str(out_dir), "--config", str(broken_config)]) == 2
    assert not out_dir.exists()


@pytest.mark.parametrize("body", ["{not json", "[1, 2]", "\"just a string\""])
@pytest.mark.parametrize("command", ["validate-report", "preview", "export"])
def test_unreadable_report_is_reported(capsys, tmp_path, command, body):
    path = tmp_path / "report.json"
    path.write_text(body, encoding="utf-8")
    argv = [command, str(path)]
    if command != "validate-report":
        argv += ["--out", str(tmp_path / "out")]

    assert main(argv) == 2
    assert f"[NG] report is not a JSON object: {path.resolve()}" in capsys.readouterr().out


def test_export_empty_report(capsys, tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("{}", encoding="utf-8")
    assert main(["export", str(path), "--out", str(tmp_path / "deck.pptx")]) == 2
    assert "[NG] report is required" in capsys.readouterr().out


def test_export(report_file, tmp_path):
    out = tmp_path / "deck.pptx"
    assert main(["export", str(report_file), "--out", str(out)]) == 0
    prs = Presentation(io.BytesIO(out.read_bytes()))
    assert len(prs.slides) == 7
