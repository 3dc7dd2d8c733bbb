"""pagecorpus CLI: entry-point for scraping runs.

Usage:
    python cli/main.py --help

Commands:
    run       : render, extract and append articles for every URL in the list
    classify  : show how the pre-fetch filter treats a single URL
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from pagecorpus.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import signal
import threading
from dataclasses import replace
from typing import Any, Optional

import typer

from pagecorpus.config import PAGE_MODES, WAIT_POLICIES, ScraperSettings
from pagecorpus.logging_config import configure_logging
from pagecorpus.scraper.errors import BrowserStartupError, ConfigError, SourceUnavailable
from pagecorpus.scraper.filters import classify_url

app = typer.Typer(
    name="pagecorpus",
    help="Render web pages and append their article text to a JSONL corpus.",
    no_args_is_help=True,
)


def _install_stop_handler(stop_event: threading.Event) -> Any:
    """Turn the first Ctrl-C into a cooperative stop between URLs.

    A second Ctrl-C interrupts immediately.  Returns the previous handler.
    """

    def _handler(signum: int, frame: Any) -> None:
        if stop_event.is_set():
            raise KeyboardInterrupt
        typer.echo("[run] Stop requested, finishing the current URL …", err=True)
        stop_event.set()

    return signal.signal(signal.SIGINT, _handler)


@app.command("run")
def run(
    urls: Optional[Path] = typer.Option(None, "--urls", help="Line-delimited URL list."),
    output: Optional[Path] = typer.Option(None, "--output", help="JSONL file to append to."),
    proxies: Optional[Path] = typer.Option(None, "--proxies", help="Optional proxy list."),
    lanes: Optional[int] = typer.Option(None, "--lanes", help="Parallel browser sessions."),
    wait_until: Optional[str] = typer.Option(
        None, "--wait-until", help=f"Load-completion policy: {' | '.join(WAIT_POLICIES)}."
    ),
    page_mode: Optional[str] = typer.Option(
        None, "--page-mode", help=f"Page reuse: {' | '.join(PAGE_MODES)}."
    ),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", help="Navigation timeout."),
    min_delay: Optional[float] = typer.Option(None, "--min-delay", help="Pacer lower bound (s)."),
    max_delay: Optional[float] = typer.Option(None, "--max-delay", help="Pacer upper bound (s)."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging verbosity."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines."),
) -> None:
    """Scrape every URL in the list and append one JSON record per article."""
    from pagecorpus.scraper.lanes import run_lanes

    overrides = {
        "url_file": urls,
        "output_file": output,
        "proxy_file": proxies,
        "lanes": lanes,
        "wait_until": wait_until,
        "page_mode": page_mode,
        "navigation_timeout_ms": timeout_ms,
        "delay_min": min_delay,
        "delay_max": max_delay,
        "log_level": log_level,
    }
    try:
        config = replace(
            ScraperSettings(), **{k: v for k, v in overrides.items() if v is not None}
        ).validate()
    except ConfigError as exc:
        typer.echo(f"[run] Invalid configuration: {exc}", err=True)
        raise typer.Exit(2)

    configure_logging(config.log_level, json_logs=json_logs)

    stop_event = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = _install_stop_handler(stop_event)

    try:
        stats = run_lanes(config, stop_event=stop_event)
    except SourceUnavailable as exc:
        typer.echo(f"[run] {exc}", err=True)
        raise typer.Exit(1)
    except BrowserStartupError as exc:
        typer.echo(f"[run] {exc}", err=True)
        raise typer.Exit(2)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    typer.echo(
        f"[run] {stats.persisted} of {stats.total} URL(s) saved to {config.output_file}"
    )


@app.command("classify")
def classify(
    url: str = typer.Argument(..., help="URL to classify."),
    min_length: Optional[int] = typer.Option(
        None, "--min-length", help="Minimum URL length (default: PAGECORPUS_MIN_URL_LENGTH)."
    ),
) -> None:
    """Print the skip classification for URL (``none`` means it would be fetched)."""
    if min_length is None:
        try:
            min_length = ScraperSettings().min_url_length
        except ConfigError as exc:
            typer.echo(f"[classify] Invalid configuration: {exc}", err=True)
            raise typer.Exit(2)
    typer.echo(classify_url(url.strip(), min_length).value)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
