"""CLI for the ``statement_ledger`` package.

This module exposes callable command handlers (``cmd_analyze``,
``cmd_transactions``, ``cmd_config_*``) that return a process exit code, and a
Typer-based console interface around them. Oracle settings are loaded once per
invocation from the environment and a local ``.env`` (``python-dotenv``);
business logic lives in :mod:`statement_ledger.api`.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .config import OracleSettings, clear_settings, load_settings, parse_provider, save_settings
from .logging_setup import configure_logging
from .models import CurrencySummary, StatementSummary
from .prompting import format_money

# ---- Rendering helpers -----------------------------------------------------------


def _render_currency(cs: CurrencySummary) -> list[str]:
    lines = [
        f"[{cs.currency}] {cs.transaction_count} transactions",
        f"  spent:  {format_money(cs.total_spent, cs.currency)}",
        f"  income: {format_money(cs.total_income, cs.currency)}",
    ]
    if cs.category_breakdown:
        lines.append("  by category:")
        ranked = sorted(cs.category_breakdown.items(), key=lambda kv: kv[1], reverse=True)
        lines.extend(f"    {cat}: {format_money(v, cs.currency)}" for cat, v in ranked)
    if cs.monthly_spending:
        lines.append("  by month:")
        lines.extend(
            f"    {month}: {format_money(v, cs.currency)}"
            for month, v in sorted(cs.monthly_spending.items())
        )
    if cs.top_merchants:
        lines.append("  top merchants:")
        lines.extend(
            f"    {i}. {m.name}: {format_money(m.total, cs.currency)}"
            for i, m in enumerate(cs.top_merchants, start=1)
        )
    return lines


def render_summary(summary: StatementSummary) -> str:
    if summary.transaction_count == 0:
        return "No transactions found."
    lines = [
        f"{summary.transaction_count} transactions; primary currency "
        f"{summary.primary_currency}"
    ]
    for cs in summary.currencies.values():
        lines.extend(_render_currency(cs))
    return "\n".join(lines)


def _load_settings_or_exit(env_file: Path | None) -> OracleSettings:
    try:
        return load_settings(env_file)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(2) from e


# ---- Command handlers ----------------------------------------------------------


def cmd_analyze(
    files: Sequence[Path],
    *,
    use_ai: bool = True,
    dedupe: bool = True,
    export: Path | None = None,
    narrative: bool = False,
    env_file: Path | None = None,
) -> int:
    """Ingest ``files``, print the per-currency summary; return the exit code."""

    from .api import analyze_files

    settings = _load_settings_or_exit(env_file) if use_ai else None
    result = analyze_files(
        list(files), settings=settings, use_ai=use_ai, dedupe=dedupe, narrative=narrative
    )

    for err in result.errors:
        print(f"Error: {err.source_file}: {err.message}", file=sys.stderr)

    print(render_summary(result.summary))
    recurring = sum(1 for t in result.ledger.transactions if t.is_recurring)
    if recurring:
        print(f"Recurring charges: {recurring}")

    if export is not None:
        path = result.ledger.save(export)
        print(f"Exported {len(result.ledger)} transactions to {path}")

    if narrative:
        print()
        print(result.narrative or "Summary unavailable: AI is not configured.")

    return 1 if result.all_failed else 0


def cmd_transactions(files: Sequence[Path], *, dedupe: bool = True) -> int:
    """Print one tab-separated line per transaction (keyword categories only)."""

    from .api import analyze_files

    result = analyze_files(list(files), use_ai=False, dedupe=dedupe)
    for err in result.errors:
        print(f"Error: {err.source_file}: {err.message}", file=sys.stderr)
    for t in result.ledger.transactions:
        print("\t".join((t.date, f"{t.amount:.2f}", t.currency, t.category, t.description)))
    return 1 if result.all_failed else 0


def cmd_config_show(env_file: Path | None = None) -> int:
    settings = _load_settings_or_exit(env_file)
    print(f"provider: {settings.provider}")
    print(f"model:    {settings.resolved_model}")
    print(f"api key:  {settings.masked_key()}")
    print(f"timeout:  {settings.timeout:g}s")
    print(f"enabled:  {'yes' if settings.enabled else 'no'}")
    return 0


def cmd_config_save(
    *,
    provider: str,
    api_key: str | None,
    model: str | None,
    env_file: Path | None = None,
) -> int:
    try:
        settings = OracleSettings(provider=parse_provider(provider), api_key=api_key, model=model)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    path = save_settings(settings, env_file)
    print(f"Saved AI settings to {path}")
    return 0


def cmd_config_clear(env_file: Path | None = None) -> int:
    path = clear_settings(env_file)
    print(f"Cleared AI settings from {path}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Turn CSV, PDF, text and screenshot statements into a categorized ledger. "
        "Loads AI settings from the environment and a local .env."
    ),
)
config_app = typer.Typer(no_args_is_help=True, help="Show, save or clear AI settings.")
app.add_typer(config_app, name="config")

# Module-level argument object to satisfy ruff B008 (no calls in parameter
# defaults).
FILES_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,
    help="Statement files (.csv, .pdf, .txt, .png, .jpg, .jpeg, .webp, .gif)",
    dir_okay=False,
    exists=False,  # unreadable files are reported per file
)

EnvFileOption = Annotated[
    Path | None, typer.Option("--env-file", help="Settings file (defaults to ./.env)")
]


@app.command("analyze")
def analyze_cmd(
    files: Annotated[list[Path], FILES_ARGUMENT],
    ai: bool = typer.Option(True, "--ai/--no-ai", help="Use the AI oracle when configured."),
    dedupe: bool = typer.Option(
        True, "--dedupe/--no-dedupe", help="Drop duplicates across overlapping uploads."
    ),
    export: Path | None = typer.Option(None, "--export", help="Write the ledger as JSON."),
    summary: bool = typer.Option(False, "--summary", help="Print an AI narrative summary."),
    env_file: EnvFileOption = None,
) -> None:
    """Analyze statements and print a per-currency spending summary."""

    raise typer.Exit(
        cmd_analyze(
            files, use_ai=ai, dedupe=dedupe, export=export, narrative=summary, env_file=env_file
        )
    )


@app.command("transactions")
def transactions_cmd(
    files: Annotated[list[Path], FILES_ARGUMENT],
    dedupe: bool = typer.Option(True, "--dedupe/--no-dedupe"),
) -> None:
    """Print extracted transactions as tab-separated lines."""

    raise typer.Exit(cmd_transactions(files, dedupe=dedupe))


@config_app.command("show")
def config_show_cmd(env_file: EnvFileOption = None) -> None:
    """Display the active AI settings with the key masked."""

    raise typer.Exit(cmd_config_show(env_file))


@config_app.command("save")
def config_save_cmd(
    provider: str = typer.Option("openai", "--provider", help="openai or gemini"),
    api_key: str | None = typer.Option(None, "--api-key", help="API key to store."),
    model: str | None = typer.Option(None, "--model", help="Model override."),
    env_file: EnvFileOption = None,
) -> None:
    """Persist AI settings into the settings file."""

    raise typer.Exit(
        cmd_config_save(provider=provider, api_key=api_key, model=model, env_file=env_file)
    )


@config_app.command("clear")
def config_clear_cmd(env_file: EnvFileOption = None) -> None:
    """Remove AI settings from the settings file."""

    raise typer.Exit(cmd_config_clear(env_file))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
