from typing import Annotated, Optional

import typer
from result import Err
from rich.console import Console

from tgrep.config.defaults import default_config
from tgrep.config.loader import load_config
from tgrep.models.enums import SearchMode
from tgrep.search import ConsoleSink, ParallelSearcher
from tgrep.services.formatting import format_error, format_summary
from tgrep.services.matching import compile_pattern

# Same code click uses for usage errors (wrong argument count, non-integer WORKERS).
EXIT_CONFIG_ERROR = 2

app = typer.Typer(help="tgrep - threaded recursive content search", add_completion=False)
console = Console(highlight=False, emoji=False)
err_console = Console(stderr=True, highlight=False, emoji=False)


@app.command()
def main(
    pattern: Annotated[str, typer.Argument(help="Substring or regular expression to look for.")],
    root: Annotated[str, typer.Argument(help="Directory to search recursively.")],
    workers: Annotated[int, typer.Argument(help="Number of worker threads; values <= 0 mean 1.")],
    mode: Annotated[int, typer.Argument(help="0 = literal substring, any other value = regular expression.")],
    config: Annotated[Optional[str], typer.Option("--config", help="Path to a JSON config file.")] = None,
    follow_symlinks: Annotated[
        Optional[bool],
        typer.Option("--follow-symlinks/--no-follow-symlinks", help="Descend into symlinked directories."),
    ] = None,
    show_errors: Annotated[
        Optional[bool], typer.Option("--errors/--no-errors", help="Report per-file errors on stderr.")
    ] = None,
    show_summary: Annotated[
        Optional[bool], typer.Option("--summary/--no-summary", help="Print the scanned-files summary line.")
    ] = None,
) -> None:
    """Print every regular file under ROOT whose contents match PATTERN."""
    loaded = load_config(config)
    if isinstance(loaded, Err):
        err_console.print(f"[warning] {loaded.unwrap_err()} Using defaults.", markup=False, soft_wrap=True)
        cfg = default_config()
    else:
        cfg = loaded.unwrap()

    if follow_symlinks is not None:
        cfg.follow_symlinks = follow_symlinks
    if show_errors is not None:
        cfg.show_errors = show_errors
    if show_summary is not None:
        cfg.show_summary = show_summary

    compiled = compile_pattern(pattern, SearchMode.from_flag(mode))
    if isinstance(compiled, Err):
        err_console.print(format_error(compiled.unwrap_err()), markup=False, soft_wrap=True)
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    effective = cfg.effective_workers(workers)
    if workers > effective:
        err_console.print(
            f"[warning] WORKERS {workers} exceeds maxWorkers; using {effective} workers.",
            markup=False,
            soft_wrap=True,
        )

    sink = ConsoleSink(console, err_console, show_errors=cfg.show_errors)
    searcher = ParallelSearcher(
        workers=effective,
        follow_symlinks=cfg.follow_symlinks,
    )
    summary = searcher.search(root, compiled.unwrap(), sink)

    if cfg.show_summary:
        console.print()
        console.print(format_summary(summary), markup=False, soft_wrap=True)
