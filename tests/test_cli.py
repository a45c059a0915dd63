from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from pypdf import PdfReader

from pdfium_cli.backends import PdfiumDocument
from pdfium_cli.cli import cli
from pdfium_cli.streams import DEFAULT_DELIMITER, split_stream


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def test_help_lists_every_command(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in (
        "render", "explode", "merge", "flatten", "images", "thumbnails",
        "text", "form", "info", "attachments", "javascripts",
    ):
        assert command in result.output


def test_explode_files(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    template = str(tmp_path / "page-%d.pdf")
    result = runner.invoke(cli, ["explode", str(sample_pdf), template, "--pages", "2-3"])

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in tmp_path.glob("page-*.pdf")) == ["page-2.pdf", "page-3.pdf"]
    assert "Exploded page 2 into" in result.output


def test_explode_stdin_to_stdout(runner: CliRunner, sample_pdf: Path) -> None:
    result = runner.invoke(cli, ["explode", "-", "-", "--pages", "last,1"], input=sample_pdf.read_bytes())

    assert result.exit_code == 0
    artifacts = split_stream(result.stdout_bytes, DEFAULT_DELIMITER)
    assert len(artifacts) == 2
    assert all(len(PdfReader(io.BytesIO(artifact)).pages) == 1 for artifact in artifacts)


def test_render(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    template = str(tmp_path / "render-%d.png")
    result = runner.invoke(cli, ["render", str(sample_pdf), template, "--file-type", "png", "--dpi", "72", "--pages", "r1"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "render-4.png").exists()


def test_render_without_placeholder(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["render", str(sample_pdf), str(tmp_path / "render.jpg")])
    assert result.exit_code == 8


def test_merge(runner: CliRunner, sample_pdf: Path, pdf_factory, tmp_path: Path) -> None:
    extra = pdf_factory("extra.pdf", pages=2)
    output = tmp_path / "merged.pdf"
    result = runner.invoke(cli, ["merge", str(sample_pdf), str(extra), str(output)])

    assert result.exit_code == 0, result.output
    assert len(PdfReader(str(output)).pages) == 7


def test_merge_from_stdin(runner: CliRunner, pdf_factory, stdin_stream) -> None:
    stream = stdin_stream(pdf_factory("a.pdf", pages=1), pdf_factory("b.pdf", pages=2))
    result = runner.invoke(cli, ["merge", "-", "-", "-"], input=stream.getvalue())

    assert result.exit_code == 0
    assert len(PdfReader(io.BytesIO(result.stdout_bytes)).pages) == 3


def test_merge_needs_two_inputs(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["merge", str(sample_pdf), str(tmp_path / "out.pdf")])
    assert result.exit_code == 8


def test_flatten(runner: CliRunner, form_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "flat.pdf"
    result = runner.invoke(cli, ["flatten", str(form_pdf), str(output)])

    assert result.exit_code == 0, result.output
    assert len(PdfReader(str(output)).pages) == 1


def test_images(runner: CliRunner, image_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["images", str(image_pdf), str(tmp_path), "--file-type", "png"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "page-1-image-1.png").exists()
    assert "Exported image 1 from page 1 into" in result.output


def test_images_missing_folder(runner: CliRunner, image_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["images", str(image_pdf), str(tmp_path / "missing")])
    assert result.exit_code == 10


def test_thumbnails(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "thumbs"
    output.mkdir()
    result = runner.invoke(cli, ["thumbnails", str(sample_pdf), str(output)])

    assert result.exit_code == 0, result.output
    assert list(output.iterdir()) == []


def test_text(runner: CliRunner, text_pdf: Path) -> None:
    result = runner.invoke(cli, ["text", str(text_pdf)])

    assert result.exit_code == 0, result.output
    assert result.output.startswith("Page 1\n")
    assert "Hello World" in result.output
    assert "\nPage 2\n" in result.output


def test_text_json_to_file(runner: CliRunner, text_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "text.json"
    result = runner.invoke(cli, ["text", str(text_pdf), str(output), "--output-type", "json", "--pages", "2"])

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert len(data) == 1
    assert data[0]["page"] == 2
    assert "Second page" in data[0]["text"]


def test_text_json_full(runner: CliRunner, text_pdf: Path) -> None:
    result = runner.invoke(
        cli,
        [
            "text", str(text_pdf), "--output-type", "json", "--json-output-details", "full",
            "--json-full-collect-font-information", "--json-full-pixel-positions-width", "400",
            "--pages", "1",
        ],
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    first = data[0]["chars"][0]
    assert first["font"]["size"] > 0
    assert first["pixel_box"]["left"] == round(first["left"] * 2)


def test_form_json(runner: CliRunner, form_pdf: Path) -> None:
    result = runner.invoke(cli, ["form", str(form_pdf), "--output-type", "json"])

    assert result.exit_code == 0, result.output
    names = {field["name"] for field in json.loads(result.output)}
    assert names == {"name", "agree", "color"}


def test_info(runner: CliRunner, sample_pdf: Path) -> None:
    result = runner.invoke(cli, ["info", str(sample_pdf)])

    assert result.exit_code == 0, result.output
    assert "Page count: 5" in result.output
    assert "(no protection)" in result.output


def test_info_json_from_stdin(runner: CliRunner, sample_pdf: Path) -> None:
    result = runner.invoke(cli, ["info", "-", "--output-type", "json"], input=sample_pdf.read_bytes())

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["page_count"] == 5


def test_attachments(runner: CliRunner, attachment_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["attachments", str(attachment_pdf), str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "notes.txt").read_bytes() == b"hello attachment"


def test_javascripts(runner: CliRunner, javascript_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["javascripts", str(javascript_pdf), str(tmp_path)])

    assert result.exit_code == 0, result.output
    scripts = list(tmp_path.glob("*.js"))
    assert len(scripts) == 1
    assert "Exported javascript 1 into" in result.output


def test_password(runner: CliRunner, encrypted_pdf: Path) -> None:
    result = runner.invoke(cli, ["info", str(encrypted_pdf)])
    assert result.exit_code == 4

    result = runner.invoke(cli, ["info", str(encrypted_pdf), "--password", "secret"])
    assert result.exit_code == 0, result.output


def test_bad_file(runner: CliRunner, tmp_path: Path) -> None:
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"not a pdf at all")
    result = runner.invoke(cli, ["info", str(path)])
    assert result.exit_code == 3


@pytest.mark.parametrize(
    ("pages", "code"),
    [("1-10", 11), ("abc", 11), ("1-2-3", 11), ("3-10", 0)],
)
def test_page_range_exit_codes(runner: CliRunner, sample_pdf: Path, tmp_path: Path, pages: str, code: int) -> None:
    args = ["explode", str(sample_pdf), str(tmp_path / "p-%d.pdf"), "--pages", pages]
    if code == 0:
        args.append("--ignore-invalid-pages")
    result = runner.invoke(cli, args)
    assert result.exit_code == code


def test_missing_input(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["info", str(tmp_path / "missing.pdf")])
    assert result.exit_code == 9


def test_usage_error(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["explode"])
    assert result.exit_code == 8


def test_option_from_environment(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        cli,
        ["explode", str(sample_pdf), str(tmp_path / "env-%d.pdf")],
        env={"PDFIUM_CLI_EXPLODE_PAGES": "last"},
    )
    assert result.exit_code == 0, result.output
    assert [path.name for path in tmp_path.glob("env-*.pdf")] == ["env-5.pdf"]


def test_info_on_aes256_document(runner: CliRunner, aes256_pdf: Path) -> None:
    result = runner.invoke(cli, ["info", str(aes256_pdf)])

    assert result.exit_code == 0, result.output
    assert "Page count: 2" in result.output
    assert "(no protection)" not in result.output


def test_explode_aes256_document(runner: CliRunner, aes256_pdf: Path) -> None:
    result = runner.invoke(cli, ["explode", str(aes256_pdf), "-"])

    assert result.exit_code == 0, result.output
    artifacts = split_stream(result.stdout_bytes, DEFAULT_DELIMITER)
    assert len(artifacts) == 2
    assert all(len(PdfReader(io.BytesIO(artifact)).pages) == 1 for artifact in artifacts)


def test_unexpected_error_is_reported(runner: CliRunner, sample_pdf: Path, monkeypatch) -> None:
    def _fail(self):
        raise RuntimeError("engine exploded")

    monkeypatch.setattr(PdfiumDocument, "metadata", _fail)
    result = runner.invoke(cli, ["info", str(sample_pdf)])

    assert result.exit_code == 7
    assert "✗ Error:" in result.output
    assert "engine exploded" in result.output
