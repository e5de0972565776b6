"""CLI entrypoint for TypeScript Importer using Typer."""

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer
from prompt_toolkit import PromptSession

from codemods.js_ts import AddImportCodemod
from core.config import default_config_path, get_config
from core.errors import ImporterError
from editor.completer import ImportCompleter
from editor.quickfix import QuickFixManager, missing_name_message
from editor.statusbar import StatusBar
from importer.engine import ImporterEngine
from importer.models import Document
from indexer.symbols import MatchMode, strip_source_extension
from indexer.watch import IndexWatcher

app = typer.Typer()


def _engine(ctx: typer.Context, scan: bool = True) -> ImporterEngine:
    root, config_path = ctx.obj["root"], ctx.obj["config"]
    engine = ImporterEngine(root, get_config(config_path, project_root=root))
    engine.add_notifier(typer.echo)
    if engine.disabled:
        typer.secho("TypeScript Importer is disabled for this workspace", fg=typer.colors.YELLOW)
        raise typer.Exit(1)
    if scan:
        report = engine.reindex(show_output=True)
        for path, message in report.failures:
            typer.secho(f"⚠️  {message}", fg=typer.colors.YELLOW, err=True)
    return engine


def _fail(error: Exception):
    typer.secho(f"❌ {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


@app.callback()
def callback(
    ctx: typer.Context,
    root: Path = typer.Option(Path("."), "--root", "-r", help="Workspace root"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file (defaults to .tsimporter.toml)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
):
    """TypeScript Importer - index exports and add imports automatically."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    ctx.obj = {"root": root.resolve(), "config": config}


@app.command()
def index(ctx: typer.Context):
    """Scan the workspace and report what was indexed."""
    engine = _engine(ctx, scan=False)
    report = engine.reindex(show_output=True)
    typer.echo(report.summary())
    for path, message in report.failures:
        typer.secho(f"  {message}", fg=typer.colors.YELLOW)


@app.command()
def symbols(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Name or part of a name"),
    exact: bool = typer.Option(False, "--exact", help="Case-sensitive exact match"),
    prefix: bool = typer.Option(False, "--prefix", help="Only names starting with the query"),
    limit: int = typer.Option(50, "--limit", help="Maximum results"),
):
    """List indexed symbols."""
    engine = _engine(ctx)
    mode = MatchMode.EXACT if exact else MatchMode.ANY
    for symbol in engine.index.get_symbols(query, prefix, mode)[:limit]:
        typer.echo(f"{symbol.name}\t{symbol.kind.value}\t{symbol.module_specifier or symbol.module_path}")


@app.command()
def modules(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Module specifier or part of one"),
    prefix: bool = typer.Option(False, "--prefix", help="Only specifiers starting with the query"),
):
    """List indexed module specifiers."""
    engine = _engine(ctx)
    for spec in engine.index.get_modules(query, prefix, MatchMode.ANY):
        typer.echo(spec)


@app.command()
def fix(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File with the unresolved identifier"),
    diagnostic: List[str] = typer.Option([], "--diagnostic", "-d", help="Compiler diagnostic message"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Unresolved identifier"),
    choice: Optional[int] = typer.Option(None, "--apply", help="Apply the numbered action"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Pick an action in a dialog"),
):
    """Suggest (and optionally apply) imports for an unresolved identifier."""
    engine = _engine(ctx)
    manager = QuickFixManager(engine)
    file = file.resolve()
    messages = list(diagnostic)
    if name:
        messages.append(missing_name_message(name))

    try:
        document = engine.open_document(file)
    except OSError as e:
        _fail(e)

    actions = manager.actions_for(document, messages)
    if not actions:
        typer.echo("No import suggestions")
        return

    selected = None
    if interactive:
        selected = manager.choose(actions)
    elif choice is not None:
        if not 1 <= choice <= len(actions):
            _fail(ValueError(f"--apply must be between 1 and {len(actions)}"))
        selected = actions[choice - 1]
    else:
        for i, action in enumerate(actions, 1):
            typer.echo(f"{i}. {action.title}")
        return

    if selected is None:
        return
    try:
        changed = manager.apply_to_file(file, selected)
    except ImporterError as e:
        _fail(e)
    typer.echo(f"✅ {selected.title}" if changed else "Already imported")


@app.command("add-import")
def add_import(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File to add the import to"),
    name: str = typer.Argument(..., help="Symbol to import"),
    module: Optional[str] = typer.Option(None, "--from", help="Module path or package of the symbol"),
    preview: bool = typer.Option(False, "--preview", help="Print a diff instead of writing"),
):
    """Import a symbol into a file, merging with an existing import when possible."""
    engine = _engine(ctx)
    candidates = engine.index.get_symbols(name, False, MatchMode.EXACT)
    if module:
        candidates = [
            s for s in candidates
            if module in (s.module_specifier, s.module_path, s.module_key, strip_source_extension(s.module_path))
        ]
    if not candidates:
        _fail(LookupError(f"No exported symbol named '{name}'"))
    if len(candidates) > 1:
        typer.echo(f"'{name}' is exported by several modules, pick one with --from:")
        for symbol in candidates:
            typer.echo(f"  {symbol.module_specifier or symbol.module_path}")
        raise typer.Exit(1)

    codemod = AddImportCodemod(engine, candidates[0])
    try:
        text = file.read_text(encoding="utf-8")
        if preview:
            typer.echo(codemod.preview(str(file.resolve()), text) or "No changes")
            return
        updated = codemod.apply(str(file.resolve()), text)
    except (ImporterError, OSError) as e:
        _fail(e)

    if updated == text:
        typer.echo("Already imported")
        return
    file.write_text(updated, encoding="utf-8")
    typer.echo(f"✅ {codemod.description}")


@app.command()
def watch(ctx: typer.Context):
    """Keep the index up to date while files change."""
    engine = _engine(ctx, scan=False)
    engine.add_status_listener(lambda status: typer.echo(f"[TypeScript Importer]: {status}"))
    engine.start()
    watcher = IndexWatcher(engine.indexer)
    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


@app.command()
def shell(
    ctx: typer.Context,
    as_file: str = typer.Option("scratch.ts", "--as", help="Complete as if editing this file"),
):
    """Interactive prompt with identifier and import path completion."""
    engine = _engine(ctx, scan=False)
    status_bar = StatusBar(hidden=engine.config.no_status_bar)
    status_bar.attach(engine)
    engine.start()

    session = PromptSession(
        completer=ImportCompleter(engine, as_file),
        bottom_toolbar=lambda: status_bar.control.text,
    )
    while True:
        try:
            line = session.prompt("ts> ")
        except (EOFError, KeyboardInterrupt):
            break
        name = line.strip()
        if not name:
            continue
        actions = engine.suggest_imports_for_diagnostic(Document(as_file, ""), missing_name_message(name))
        for action in actions:
            typer.echo(action.title)
        if not actions:
            typer.echo("No import suggestions")


@app.command()
def doctor(ctx: typer.Context):
    """Diagnose configuration and workspace setup."""
    root, config_path = ctx.obj["root"], ctx.obj["config"]
    config = get_config(config_path, project_root=root)

    typer.echo("🔍 TypeScript Importer Doctor")
    typer.echo("=============================")

    if root.is_dir():
        typer.echo(f"✅ Workspace root {root}")
    else:
        typer.echo(f"❌ Workspace root {root} not found")

    for candidate in [config_path, root / ".tsimporter.toml", default_config_path()]:
        if candidate is not None and Path(candidate).exists():
            typer.echo(f"✅ Config file found at {candidate}")
            break
    else:
        typer.echo("⚠️  No config file found (using defaults)")

    if config.disabled:
        typer.echo("⚠️  Importer is disabled in config")
    typer.echo(f"Scanning: {', '.join(config.files_to_scan)}")
    typer.echo(f"Excluding: {', '.join(config.files_to_exclude)}")


if __name__ == "__main__":
    app()
