# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from rich.console import Console
from rich.table import Table
from ..core.builder import ItemBuilder
from ..core.config import Config
from ..core.models import SeriesEntry
from ..infrastructure.db.database import CatalogFile
from ..infrastructure.db.repository import CatalogRepository
from ..infrastructure.storage.asset_store import AssetStore
from ..services.audit_service import AuditService
from ..services.catalog_service import CatalogService, OperationStatus
from ..services.deletion_service import DeletionReconciler

app = typer.Typer(help="Media Catalog - manage the movie and series catalog.")
console = Console()


def _load_config(config_path: str) -> Config:
    try:
        return Config.load(config_path)
    except Exception as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)


def _build(config: Config):
    repo = CatalogRepository(CatalogFile(config.data_file))
    asset_store = AssetStore(config.uploads_dir, config.uploads_url_prefix, config.max_upload_bytes)
    reconciler = DeletionReconciler(config.uploads_dir, config.uploads_url_prefix)
    catalog_service = CatalogService(
        config, repo, asset_store, ItemBuilder(config.episode_title_template), reconciler
    )
    audit_service = AuditService(config, repo, asset_store, reconciler)
    return catalog_service, audit_service


@app.command("list")
def list_entries(config_path: str = "config.yaml"):
    """
    List every catalog entry.
    """
    config = _load_config(config_path)
    catalog_service, _ = _build(config)
    entries = catalog_service.list_entries()

    table = Table(title="Catalog")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="magenta")
    table.add_column("Category")
    table.add_column("Type", style="green")
    table.add_column("Media", style="yellow")

    for entry in entries:
        if isinstance(entry, SeriesEntry):
            media = f"{len(entry.episodes)} episode(s)"
        else:
            media = entry.video_url or "-"
        table.add_row(str(entry.id), entry.title or "", entry.category or "", entry.type, media)

    console.print(table)
    console.print(f"\n[bold]{len(entries)}[/bold] entries.")


@app.command("delete")
def delete_entry(entry_id: int, config_path: str = "config.yaml"):
    """
    Delete an entry and the files it owns.
    """
    config = _load_config(config_path)
    catalog_service, _ = _build(config)
    result = catalog_service.delete_entry(entry_id)

    if result.status == OperationStatus.NOT_FOUND:
        console.print(f"[yellow]Entry {entry_id} not found.[/yellow]")
        raise typer.Exit(1)
    if not result.success:
        console.print(f"[red]Delete failed:[/red] {result.error}")
        raise typer.Exit(1)
    console.print(f"[green]Deleted entry {entry_id} ({result.item.title}).[/green]")


@app.command("audit")
def audit_assets(config_path: str = "config.yaml", prune: bool = False):
    """
    Report catalog references to missing files and files no entry references.
    """
    config = _load_config(config_path)
    _, audit_service = _build(config)
    report = audit_service.audit()

    for ref in report.dangling:
        console.print(f"[red]Missing:[/red] entry {ref.entry_id} -> {ref.url}")
    for path in report.orphans:
        console.print(f"[yellow]Orphan:[/yellow] {path}")

    if report.clean:
        console.print(f"[green]{report.entries} entries checked, no problems found.[/green]")
        return

    console.print(f"\n{len(report.dangling)} missing file(s), {len(report.orphans)} orphan(s).")
    if prune and report.orphans:
        removed = audit_service.prune_orphans()
        console.print(f"[green]Removed {len(removed)} orphaned file(s).[/green]")


if __name__ == "__main__":
    app()
