"""react-jitter CLI - inject render and hook timing probes into React modules."""
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from .analyzer.location import compute_id
from .analyzer.parser import LanguageParser
from .config import JitterConfig, TransformOptions, __version__, get_settings, load_config
from .errors import ConfigurationError, UnsupportedFileError
from .rewriter.transformer import JitterTransformer, TransformResult
from .utils.logger import configure_logging
from .utils.safe_console import SafeConsole

app = typer.Typer(
    name="react-jitter",
    help="Inject render and hook timing probes into React components",
    add_completion=False
)
# Use SafeConsole for Windows Unicode compatibility
console = SafeConsole()
err_console = SafeConsole(stderr=True)

# Never descended into when walking directories
SKIPPED_DIRS = {'node_modules', '.git', 'dist', 'build', '.next', 'coverage'}


def _fail(message: str, code: int = 2):
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code)


def resolve_config(config_file: Optional[Path], ignore_hooks: List[str], excludes: List[str],
                   include_arguments: bool) -> JitterConfig:
    """Load options from ``--config`` (or the settings default) and apply CLI overrides.

    Raises:
        ConfigurationError: If the config file is missing or malformed
    """
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        config = load_config(config_file)
    else:
        default_path = get_settings().config_path
        config = load_config(default_path if default_path.exists() else None)

    update = {}
    if ignore_hooks:
        update['ignore_hooks'] = list(config.ignore_hooks) + list(ignore_hooks)
    if excludes:
        update['exclude'] = list(config.exclude) + list(excludes)
    if include_arguments:
        update['include_arguments'] = True
    return config.model_copy(update=update) if update else config


def relative_name(file_path: Path, root: Path) -> str:
    """POSIX path of ``file_path`` relative to ``root`` (as embedded in probe metadata)."""
    try:
        return file_path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return file_path.as_posix()


def iter_source_files(paths: List[Path]) -> Iterator[Path]:
    """Expand directories into the supported source files below them."""
    for path in paths:
        if path.is_dir():
            for file_path in sorted(path.rglob('*')):
                if any(part in SKIPPED_DIRS for part in file_path.relative_to(path).parts):
                    continue
                if file_path.is_file() and LanguageParser.is_supported(file_path):
                    yield file_path
        else:
            yield path


def _transform_file(transformer: JitterTransformer, file_path: Path, root: Path) -> TransformResult:
    if not file_path.exists():
        _fail(f"Path does not exist: {file_path}")
    try:
        parser = LanguageParser.from_file_extension(file_path)
    except UnsupportedFileError as e:
        _fail(str(e))
    source = file_path.read_text(encoding='utf-8')
    return transformer.transform_source(source, relative_name(file_path, root), parser)


@app.command()
def transform(
    paths: List[Path] = typer.Argument(..., help="Files or directories to instrument"),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", "-o", help="Write instrumented files below this directory"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON plugin options file"),
    ignore_hook: List[str] = typer.Option([], "--ignore-hook", help="Additional hook name to leave untouched (repeatable)"),
    exclude: List[str] = typer.Option([], "--exclude", help="Additional glob of files to leave untouched (repeatable)"),
    include_arguments: bool = typer.Option(False, "--include-arguments", help="Record hook argument source text"),
    check: bool = typer.Option(False, "--check", help="Exit 1 if any file would change; write nothing"),
    root: Optional[Path] = typer.Option(None, "--root", help="Project root embedded file paths are relative to"),
):
    """Instrument components and hooks in PATHS."""
    try:
        config = resolve_config(config_file, ignore_hook, exclude, include_arguments)
    except ConfigurationError as e:
        _fail(str(e))

    root = root or get_settings().project_root
    transformer = JitterTransformer(TransformOptions.from_config(config))

    files = list(iter_source_files(paths))
    if not files:
        _fail("No JavaScript or TypeScript files found")
    if len(files) > 1 and out_dir is None and not check:
        _fail("Several files given: use --out-dir or --check")

    changed = []
    for file_path in files:
        name = relative_name(file_path, root)
        # Directory walks skip excluded files without reading them
        if len(files) > 1 and transformer.should_exclude(name):
            continue

        result = _transform_file(transformer, file_path, root)
        if result.instrumented:
            changed.append((name, result))

        if check:
            continue
        if out_dir is not None:
            target = out_dir / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(result.code, encoding='utf-8')
        else:
            typer.echo(result.code, nl=False)

    if check:
        for name, result in changed:
            err_console.print(f"[yellow]would instrument[/yellow] {escape(name)} "
                              f"({len(result.scopes)} scope(s), {len(result.hook_sites)} hook call(s))")
        if changed:
            raise typer.Exit(1)
        err_console.print("[green]✓ Nothing to instrument[/green]")
        return

    if out_dir is not None:
        err_console.print(f"[bold green]Instrumented {len(changed)} of {len(files)} file(s)[/bold green] "
                          f"→ {escape(str(out_dir))}")


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="Source file to analyze"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON plugin options file"),
    include_arguments: bool = typer.Option(False, "--include-arguments", help="Show captured hook arguments"),
    root: Optional[Path] = typer.Option(None, "--root", help="Project root embedded file paths are relative to"),
):
    """Show what would be instrumented in PATH, without writing anything."""
    try:
        config = resolve_config(config_file, [], [], include_arguments)
    except ConfigurationError as e:
        _fail(str(e))

    root = root or get_settings().project_root
    transformer = JitterTransformer(TransformOptions.from_config(config))
    result = _transform_file(transformer, path, root)
    name = relative_name(path, root)

    if result.excluded:
        console.print(f"[dim]{escape(name)} is excluded from instrumentation[/dim]")
        return
    if not result.instrumented:
        console.print(f"[dim]Nothing to instrument in {escape(name)}[/dim]")
        return

    scope_table = Table(title=f"Scopes: {name}")
    scope_table.add_column("Name", style="cyan")
    scope_table.add_column("Id", style="yellow")
    scope_table.add_column("Line", justify="right", style="green")
    scope_table.add_column("Column", justify="right", style="green")
    for scope in result.scopes:
        scope_table.add_row(scope.name, scope.id, str(scope.line), str(scope.column))
    console.print(scope_table)

    if result.hook_sites:
        hook_table = Table(title="Hook Calls")
        hook_table.add_column("Hook", style="cyan")
        hook_table.add_column("Id", style="yellow")
        hook_table.add_column("Line", justify="right", style="green")
        hook_table.add_column("Column", justify="right", style="green")
        if include_arguments:
            hook_table.add_column("Arguments", style="magenta", no_wrap=False)
        for site in result.hook_sites:
            row = [site.hook, site.id, str(site.line), str(site.column)]
            if include_arguments:
                row.append(escape(", ".join(site.arguments or ())))
            hook_table.add_row(*row)
        console.print(hook_table)


@app.command("hash")
def hash_location(
    file: str = typer.Argument(..., help="File path as embedded in metadata"),
    line: int = typer.Argument(..., help="1-based line"),
    column: int = typer.Argument(..., help="0-based display column"),
):
    """Print the probe id for a source location."""
    typer.echo(compute_id(file, line, column))


def _version_callback(value: bool):
    if value:
        typer.echo(f"react-jitter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default from REACT_JITTER_LOG_LEVEL)"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True,
                                 help="Show version and exit"),
):
    """react-jitter - render and hook timing probes for React."""
    configure_logging((log_level or get_settings().log_level).upper(), err_console)


if __name__ == "__main__":
    app()
