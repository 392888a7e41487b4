"""Typer based command line entry points for MergeFlow."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from mergeflow.config import DEFAULT_ROW_LIMIT, MergeJobConfig, load_job_config
from mergeflow.core.errors import MergeFlowError
from mergeflow.core.logger import get_logger, set_level
from mergeflow.services.render import list_form_fields, merge_documents
from mergeflow_io.excel_reader import count_rows, read_headers
from mergeflow_io.mapping import match_headers
from mergeflow_io.pdf_io import extract_text, read_info

app = typer.Typer(help="Merge spreadsheet rows into PDF templates.")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    try:
        set_level(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _fail(exc: Exception) -> None:
    get_logger().error("%s", exc)
    typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("fields")
def fields_command(
    template: Path = typer.Argument(..., help="Template PDF to inspect."),
    data: Optional[Path] = typer.Option(
        None, "--data", "-d", help="Spreadsheet whose headers are matched to field names."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print fields as JSON."),
) -> None:
    """List the form fields of a template with their kind.

    With ``--data`` each field also gets the column whose header matches its
    name (``-1`` when none does), a starting point for a mapping file.
    """

    try:
        infos = list_form_fields(template)
        suggested = match_headers([f.name for f in infos], read_headers(data)) if data is not None else None
    except (MergeFlowError, FileNotFoundError) as exc:
        _fail(exc)
        return

    if as_json:
        payload = []
        for info in infos:
            item: dict[str, object] = {"name": info.name, "kind": info.kind.value}
            if suggested is not None:
                item["column"] = suggested[info.name]
            payload.append(item)
        typer.echo(json.dumps(payload, ensure_ascii=False))
        return
    if not infos:
        typer.echo("No form fields found.")
        return
    for info in infos:
        line = f"{info.name}\t{info.kind.value}"
        if suggested is not None:
            line += f"\t{suggested[info.name]}"
        typer.echo(line)


@app.command("inspect")
def inspect_command(
    template: Path = typer.Argument(..., help="Template PDF to inspect."),
    text: bool = typer.Option(False, "--text", help="Also print a text snippet of every page."),
    max_chars: int = typer.Option(200, "--max-chars", min=1, help="Snippet length per page."),
) -> None:
    """Show page count, page sizes and form presence to pick the --page to merge."""

    try:
        info = read_info(template)
        snippets = extract_text(template, max_chars_per_page=max_chars) if text else []
    except (MergeFlowError, FileNotFoundError) as exc:
        _fail(exc)
        return

    typer.echo(f"Pages: {info.page_count}")
    typer.echo(f"Form: {'yes' if info.has_form else 'no'}")
    for number, (width, height) in enumerate(info.page_sizes, start=1):
        typer.echo(f"{number}\t{width:g} x {height:g} pt")
        if text:
            typer.echo(f"  {snippets[number - 1].strip()}")


@app.command("headers")
def headers_command(
    data: Path = typer.Argument(..., help="Spreadsheet whose first row holds the headers."),
) -> None:
    """Show column indexes usable in overlays and field mappings."""

    try:
        headers = read_headers(data)
        total = count_rows(data)
    except (MergeFlowError, FileNotFoundError) as exc:
        _fail(exc)
        return

    for header in headers:
        typer.echo(f"{header.index}\t{header.label}")
    typer.echo(f"Data rows: {total}")


def _parse_mapping_pairs(pairs: List[str]) -> dict[str, int]:
    mapping: dict[str, int] = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"Invalid field mapping '{pair}', expected FIELD=COLUMN")
        name, _, column = pair.rpartition("=")
        try:
            mapping[name.strip()] = int(column)
        except ValueError as exc:
            raise typer.BadParameter(f"Column index must be an integer: '{pair}'") from exc
    return mapping


def _build_job(
    config: Optional[Path],
    template: Optional[Path],
    data: Optional[Path],
    output: Optional[Path],
    page: int,
    rows: int,
    split: bool,
    overlay: Optional[Path],
    canvas_width: Optional[float],
    mapping: Optional[Path],
    field: List[str],
    font_dir: List[Path],
) -> MergeJobConfig:
    if config is not None:
        return load_job_config(config)
    missing = [name for name, value in (("--template", template), ("--data", data), ("--output", output)) if value is None]
    if missing:
        raise typer.BadParameter(f"Missing options without --config: {', '.join(missing)}")
    return MergeJobConfig(
        template=template,
        data_source=data,
        output=output,
        page_index=page - 1,
        row_limit=rows,
        combine=not split,
        overlay_path=overlay,
        canvas_width=canvas_width,
        field_mapping=_parse_mapping_pairs(field) or None,
        mapping_path=mapping,
        font_dirs=font_dir,
    )


@app.command("merge")
def merge_command(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML job file; other options are ignored."),
    template: Optional[Path] = typer.Option(None, "--template", "-t", help="Template PDF."),
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="Spreadsheet with a header row."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output PDF (naming base in split mode)."),
    page: int = typer.Option(1, "--page", min=1, help="1-based template page to render."),
    rows: int = typer.Option(DEFAULT_ROW_LIMIT, "--rows", min=1, help="Maximum number of data rows."),
    split: bool = typer.Option(False, "--split", help="Write one PDF per row instead of one combined PDF."),
    overlay: Optional[Path] = typer.Option(None, "--overlay", help="Canvas overlay JSON."),
    canvas_width: Optional[float] = typer.Option(None, "--canvas-width", help="Width of the authoring canvas."),
    mapping: Optional[Path] = typer.Option(None, "--mapping", help="YAML/JSON field mapping file."),
    field: List[str] = typer.Option([], "--field", "-f", help="Inline mapping FIELD=COLUMN, repeatable."),
    font_dir: List[Path] = typer.Option([], "--font-dir", help="Directory with TrueType fonts, repeatable."),
) -> None:
    """Merge data rows into the template."""

    logger = get_logger()
    try:
        job = _build_job(config, template, data, output, page, rows, split, overlay, canvas_width, mapping, field, font_dir)
        result = merge_documents(
            output=job.output,
            template=job.template,
            page_index=job.page_index,
            data_source=job.data_source,
            row_limit=job.row_limit,
            combine=job.combine,
            overlay=job.load_overlay(),
            canvas_width=job.canvas_width,
            field_mapping=job.resolved_field_mapping(),
            font_dirs=job.font_dirs,
        )
    except (MergeFlowError, FileNotFoundError, ValidationError) as exc:
        _fail(exc)
        return

    logger.info("Merged %s rows into %s file(s)", result.row_count, result.file_count)
    for path in result.output_paths:
        typer.echo(str(path))
    typer.secho(f"{result.file_count} file(s) written", fg=typer.colors.GREEN)


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
