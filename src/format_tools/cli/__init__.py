from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, apply_settings, dump_config, load_config
from ..core import FormatToolsService
from ..crypto import encrypt_bytes
from ..errors import FormatToolsError
from ..models import ConvertOptions, FileSource, TextSource
from ..settings import get_settings
from ..utils import atomic_write_bytes

console = Console()

app = typer.Typer(help="Prepare Markdown inputs and templates for document conversion")


def _load_config(path: Path | None) -> AppConfig:
    settings = get_settings()
    return apply_settings(load_config(path or settings.config_path), settings)


def _service(config: Path | None) -> FormatToolsService:
    return FormatToolsService(_load_config(config))


def _fail(exc: FormatToolsError) -> typer.Exit:
    console.print(f"[red]Failed[/red]: {exc.code} - {exc}")
    return typer.Exit(1)


@app.command()
def prepare(
    file: Path | None = typer.Argument(None, help="Markdown file or archive"),
    text: str | None = typer.Option(None, "--text", help="Prepare pasted Markdown instead of a file"),
    select: str | None = typer.Option(None, "--select", help="Markdown file to pick inside an archive"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    if (file is None) == (text is None):
        console.print("[red]Provide either FILE or --text[/red]")
        raise typer.Exit(2)
    service = _service(config)
    source = TextSource(content=text) if text is not None else FileSource(path=file, selected_markdown=select)
    try:
        prepared = service.prepare_input(source)
    except FormatToolsError as exc:
        raise _fail(exc) from exc
    console.print(f"[green]Prepared[/green]: {prepared.markdown_path}")
    console.print(f"Images copied: {prepared.image_count}")
    if len(prepared.markdown_files) > 1:
        for name in prepared.markdown_files:
            console.print(f"  - {name}")
    for warning in prepared.warnings:
        console.print(f"[yellow]Warning[/yellow]: {warning}")


@app.command()
def convert(
    file: Path,
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file"),
    template: str | None = typer.Option(None, "--template", help="Template id to use as reference document"),
    member: bool | None = typer.Option(
        None, "--member/--no-member", help="Treat the template as protected (default: from catalog)"
    ),
    key: str | None = typer.Option(None, "--key", help="Passphrase for protected templates"),
    preset: str | None = typer.Option(None, "--preset", help="Metadata preset id"),
    title: str | None = typer.Option(None, "--title"),
    author: list[str] | None = typer.Option(None, "--author"),
    date: str | None = typer.Option(None, "--date", help="YYYY-MM-DD"),
    select: str | None = typer.Option(None, "--select", help="Markdown file to pick inside an archive"),
    metadata_file: Path | None = typer.Option(None, "--metadata-file"),
    crossref: bool = typer.Option(False, "--crossref", help="Run the crossref filter when installed"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = _service(config)
    user_config: dict[str, object] = {"title": title, "date": date}
    if author:
        user_config["author"] = author[0] if len(author) == 1 else list(author)
    try:
        prepared = service.prepare_input(FileSource(path=file, selected_markdown=select))
        metadata = None
        if preset or template or any(value for value in user_config.values()):
            metadata = service.build_metadata(user_config, preset=preset, template_id=template)
        reference_doc = None
        if template:
            reference_doc = service.stage_template(template, member, key).reference_doc
        result = service.convert(
            ConvertOptions(
                input_file=prepared.markdown_path,
                output_file=output,
                source_dir=prepared.source_dir,
                source_name=prepared.source_name,
                reference_doc=reference_doc,
                metadata=metadata,
                metadata_file=metadata_file,
                use_crossref=crossref,
            )
        )
    except FormatToolsError as exc:
        raise _fail(exc) from exc
    console.print(f"[green]Success[/green]: {result.output_path}")


@app.command()
def templates(config: Path | None = typer.Option(None, "--config", help="Path to config.toml")) -> None:
    service = _service(config)
    try:
        catalog = service.list_templates()
    except FormatToolsError as exc:
        raise _fail(exc) from exc
    table = Table(title="Templates")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Protected")
    for meta in catalog.templates:
        table.add_row(meta.id, meta.name, meta.category or "-", "yes" if meta.member else "no")
    console.print(table)
    if catalog.has_premium:
        console.print("Protected templates need a passphrase (--key or FORMAT_TOOLS_TEMPLATE_KEY).")


@app.command()
def stage(
    template: str,
    member: bool | None = typer.Option(None, "--member/--no-member"),
    key: str | None = typer.Option(None, "--key"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = _service(config)
    try:
        info = service.stage_template(template, member, key)
    except FormatToolsError as exc:
        raise _fail(exc) from exc
    console.print(f"[green]Staged[/green]: {info.reference_doc}")


@app.command()
def clean(
    keep: int | None = typer.Option(None, "--keep", min=0, help="Keep the most recent N sessions"),
    all_: bool = typer.Option(False, "--all", help="Delete every session"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = _service(config)
    if all_:
        try:
            service.clear_sessions()
        except FormatToolsError as exc:
            raise _fail(exc) from exc
        console.print("Removed all sessions.")
        return
    removed = service.prune_sessions(keep)
    console.print(f"Removed {len(removed)} session directories.")


@app.command()
def engine(config: Path | None = typer.Option(None, "--config", help="Path to config.toml")) -> None:
    status = _service(config).engine_status()
    table = Table(title="Conversion engine")
    table.add_column("Component")
    table.add_column("Path")
    table.add_column("Installed")
    table.add_row("engine", str(status.engine_path), "yes" if status.engine_installed else "no")
    table.add_row("crossref", str(status.crossref_path), "yes" if status.crossref_installed else "no")
    console.print(table)
    if status.version:
        console.print(f"Version: {status.version}")


@app.command("encrypt-template")
def encrypt_template(
    source: Path,
    destination: Path,
    key: str = typer.Option(..., "--key", prompt=True, hide_input=True),
) -> None:
    if not source.is_file():
        console.print(f"[red]Not found[/red]: {source}")
        raise typer.Exit(1)
    atomic_write_bytes(destination, encrypt_bytes(source.read_bytes(), key))
    console.print(f"[green]Encrypted[/green]: {destination}")


@app.command("show-config")
def show_config(config: Path | None = typer.Option(None, "--config", help="Path to config.toml")) -> None:
    console.print_json(dump_config(_load_config(config)))


@app.command()
def serve(config: Path | None = typer.Option(None, "--config", help="Path to config.toml")) -> None:
    import uvicorn

    from ..api import create_app

    cfg = _load_config(config)
    try:
        api = create_app(cfg)
    except RuntimeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    uvicorn.run(api, host=cfg.api.host, port=cfg.api.port)


if __name__ == "__main__":
    app()
