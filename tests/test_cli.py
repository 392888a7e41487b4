"""CLI integration tests for the fields, inspect, headers and merge commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from PyPDF2 import PdfReader
from typer.testing import CliRunner

from conftest import annotation_values, build_plain_pdf
from mergeflow import cli


@pytest.fixture
def cli_runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep the rotating file and console handlers out of captured output.
    import mergeflow.core.logger as core_logger

    monkeypatch.setattr(core_logger, "_LOGGER", logging.getLogger("mergeflow.cli-tests"))
    return CliRunner()


def test_fields_json(cli_runner: CliRunner, form_template: Path) -> None:
    result = cli_runner.invoke(cli.app, ["fields", str(form_template), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert {item["name"]: item["kind"] for item in payload} == {
        "Name": "text",
        "Agree": "checkbox",
        "Color": "dropdown",
    }


def test_fields_without_form(cli_runner: CliRunner, plain_template: Path) -> None:
    result = cli_runner.invoke(cli.app, ["fields", str(plain_template)])

    assert result.exit_code == 0
    assert "No form fields found." in result.stdout


def test_fields_suggests_columns_from_headers(cli_runner: CliRunner, form_template: Path, workbook_factory) -> None:
    data = workbook_factory(["color", "Full Name", "name"], [["Blue", "Alice Smith", "Alice"]])

    result = cli_runner.invoke(cli.app, ["fields", str(form_template), "--data", str(data), "--json"])

    assert result.exit_code == 0, result.output
    columns = {item["name"]: item["column"] for item in json.loads(result.stdout)}
    assert columns == {"Name": 2, "Agree": -1, "Color": 0}


def test_fields_plain_output_with_data(cli_runner: CliRunner, form_template: Path, name_workbook: Path) -> None:
    result = cli_runner.invoke(cli.app, ["fields", str(form_template), "-d", str(name_workbook)])

    assert result.exit_code == 0, result.output
    assert "Name\ttext\t0" in result.stdout.splitlines()


def test_fields_with_missing_data_fails(cli_runner: CliRunner, tmp_path: Path, form_template: Path) -> None:
    result = cli_runner.invoke(cli.app, ["fields", str(form_template), "--data", str(tmp_path / "none.xlsx")])

    assert result.exit_code == 1


def test_inspect_reports_pages_and_form(cli_runner: CliRunner, tmp_path: Path) -> None:
    template = build_plain_pdf(tmp_path / "two.pdf", pages=2)

    result = cli_runner.invoke(cli.app, ["inspect", str(template), "--text"])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[:2] == ["Pages: 2", "Form: no"]
    assert "2\t612 x 792 pt" in lines
    assert "  Plain page 2" in lines


def test_inspect_form_template(cli_runner: CliRunner, form_template: Path) -> None:
    result = cli_runner.invoke(cli.app, ["inspect", str(form_template)])

    assert result.exit_code == 0, result.output
    assert "Form: yes" in result.stdout
    assert "Plain page" not in result.stdout


def test_inspect_missing_template_fails(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli.app, ["inspect", str(tmp_path / "none.pdf")])

    assert result.exit_code == 1


def test_headers_lists_columns_and_row_count(cli_runner: CliRunner, workbook_factory) -> None:
    data = workbook_factory(["Name", "City"], [["Alice", "Oslo"], ["Bob", "Rome"], ["Eve", "Lima"]])

    result = cli_runner.invoke(cli.app, ["headers", str(data)])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[:2] == ["0\tName", "1\tCity"]
    assert "Data rows: 3" in lines


def test_merge_combined_with_inline_mapping(
    cli_runner: CliRunner, tmp_path: Path, form_template: Path, name_workbook: Path
) -> None:
    output = tmp_path / "merged.pdf"

    result = cli_runner.invoke(
        cli.app,
        ["merge", "-t", str(form_template), "-d", str(name_workbook), "-o", str(output), "-f", "Name=0"],
    )

    assert result.exit_code == 0, result.output
    assert "1 file(s) written" in result.stdout
    reader = PdfReader(output)
    assert len(reader.pages) == 2
    assert annotation_values(reader, 1)["Name"] == "Bob"


def test_merge_split_writes_one_file_per_row(
    cli_runner: CliRunner, tmp_path: Path, form_template: Path, name_workbook: Path
) -> None:
    output = tmp_path / "letters.pdf"

    result = cli_runner.invoke(
        cli.app,
        ["merge", "-t", str(form_template), "-d", str(name_workbook), "-o", str(output), "--split", "--rows", "1"],
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "letters-1.pdf").exists()
    assert not (tmp_path / "letters-2.pdf").exists()
    assert str(tmp_path / "letters-1.pdf") in result.stdout


def test_merge_from_job_file(cli_runner: CliRunner, tmp_path: Path, form_template: Path, name_workbook: Path) -> None:
    job = tmp_path / "job.yaml"
    job.write_text(
        "\n".join(
            [
                f"template: {form_template.name}",
                f"data_source: {name_workbook.name}",
                "output: out/result.pdf",
                "combine: false",
                "field_mapping:",
                "  Name: 0",
            ]
        ),
        encoding="utf-8",
    )

    result = cli_runner.invoke(cli.app, ["merge", "--config", str(job)])

    assert result.exit_code == 0, result.output
    first = PdfReader(tmp_path / "out" / "result-1.pdf")
    assert annotation_values(first, 0)["Name"] == "Alice"


def test_merge_missing_template_fails(cli_runner: CliRunner, tmp_path: Path, name_workbook: Path) -> None:
    output = tmp_path / "never.pdf"

    result = cli_runner.invoke(
        cli.app,
        ["merge", "-t", str(tmp_path / "missing.pdf"), "-d", str(name_workbook), "-o", str(output)],
    )

    assert result.exit_code == 1
    assert "Error" in result.output
    assert not output.exists()


def test_merge_rejects_malformed_field_pair(
    cli_runner: CliRunner, tmp_path: Path, form_template: Path, name_workbook: Path
) -> None:
    result = cli_runner.invoke(
        cli.app,
        ["merge", "-t", str(form_template), "-d", str(name_workbook), "-o", str(tmp_path / "x.pdf"), "-f", "Name"],
    )

    assert result.exit_code == 2


def test_unknown_log_level_is_rejected(cli_runner: CliRunner, plain_template: Path) -> None:
    result = cli_runner.invoke(cli.app, ["--log-level", "LOUD", "fields", str(plain_template)])

    assert result.exit_code == 2


def test_merge_requires_paths_without_config(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli.app, ["merge"])

    assert result.exit_code == 2
