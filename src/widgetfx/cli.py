"""CLI entry point for WidgetFX.

Each command is one execution context: ``refresh`` and ``convert`` act as
the foreground converter, ``press`` is the widget keypad invocation and
``widget`` renders (or keeps regenerating) the widget timeline. They share
state only through the snapshot store directory.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Optional, Tuple

import click

from widgetfx import app
from widgetfx.adapters.formatting.formatter import session_lines, widget_lines
from widgetfx.application.converter_service import ConverterSession
from widgetfx.config.settings import Settings, settings
from widgetfx.domain.keypad import KeypadButton
from widgetfx.domain.models import Preset
from widgetfx.shared.logging_conf import setup_logging
from widgetfx.shared.validators import normalize_currency_code, validate_preset_amount


def _currency(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    code = normalize_currency_code(value)
    if code is None:
        raise click.BadParameter(f"Invalid currency code: {value!r}. Use three letters, e.g. USD.")
    return code


def _button(ctx: click.Context, param: click.Parameter, value: str) -> KeypadButton:
    try:
        return KeypadButton.parse(value)
    except ValueError as exc:
        names = ", ".join(b.value for b in KeypadButton)
        raise click.BadParameter(f"{exc}. Choose one of: {names}") from exc


def _print_session(session: ConverterSession) -> None:
    click.echo(
        session_lines(
            session.base_currency,
            session.target_currency,
            session.amount_text,
            session.converted_value,
            session.current_rate(),
            session.last_updated,
            series=session.chart_series,
            notice=session.notice,
            provider=session.gateway.get_last_provider(),
        )
    )


async def _refresh(
    session: ConverterSession,
    base: Optional[str],
    target: Optional[str],
    swap: bool,
) -> None:
    refreshed = False
    if base:
        refreshed = await session.select_base(base) or refreshed
    if target:
        refreshed = await session.select_target(target) or refreshed
    if swap:
        await session.swap_currencies()
        refreshed = True
    if not refreshed:
        await session.activate()


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Shared store directory (defaults to WIDGETFX_DATA_DIR).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log at INFO level.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], verbose: bool) -> None:
    """Currency converter with a shared snapshot store and a widget timeline."""
    cfg: Settings = settings
    if data_dir is not None:
        cfg = settings.model_copy(update={"data_dir": data_dir})
    setup_logging(
        level=logging.INFO if verbose else logging.WARNING,
        context=ctx.invoked_subcommand or "cli",
        log_dir=cfg.log_dir,
        max_bytes=cfg.log_max_bytes,
        backup_count=cfg.log_backup_count,
    )
    ctx.obj = cfg


@cli.command()
@click.option("--base", callback=_currency, default=None, help="Base currency code.")
@click.option("--target", callback=_currency, default=None, help="Target currency code.")
@click.option("--amount", default=None, help="Amount to convert.")
@click.option("--swap", is_flag=True, help="Swap base and target before refreshing.")
@click.pass_obj
def refresh(cfg: Settings, base: Optional[str], target: Optional[str], amount: Optional[str], swap: bool) -> None:
    """Fetch rates and history, recompute and persist the conversion."""
    session = app.build_session(cfg)
    if amount is not None:
        session.update_amount(amount)
    asyncio.run(_refresh(session, base, target, swap))
    _print_session(session)


@cli.command()
@click.argument("amount")
@click.pass_obj
def convert(cfg: Settings, amount: str) -> None:
    """Convert AMOUNT with the cached rates (no network)."""
    session = app.build_session(cfg)
    session.update_amount(amount)
    _print_session(session)


@cli.command()
@click.argument("button", callback=_button)
@click.pass_context
def press(ctx: click.Context, button: KeypadButton) -> None:
    """Apply a widget keypad BUTTON (digit0-9, decimal, backspace) to the stored amount."""
    keypad = app.build_keypad(ctx.obj)
    if not keypad.press(button):
        click.echo("Could not save the updated amount.", err=True)
        ctx.exit(1)
    click.echo(keypad.last_snapshot.amount_text)


@cli.command()
@click.option("--watch", is_flag=True, help="Keep regenerating on schedule and on reload requests.")
@click.pass_obj
def widget(cfg: Settings, watch: bool) -> None:
    """Render the widget from the shared store."""
    def render(entry) -> None:
        click.echo(widget_lines(entry))
        if watch:
            click.echo("")

    if not watch:
        render(app.build_timeline(cfg).timeline().entries[0])
        return

    scheduler = app.build_scheduler(render, cfg)
    stop = threading.Event()
    try:
        scheduler.run(stop)
    except KeyboardInterrupt:
        stop.set()
        scheduler.wake()


@cli.group()
def presets() -> None:
    """Show or replace widget amount presets."""


@presets.command("show")
@click.pass_obj
def presets_show(cfg: Settings) -> None:
    for preset in app.build_store(cfg).load_presets():
        click.echo(f"{preset.title}\t{preset.amount:g}")


@presets.command("set")
@click.argument("amounts", nargs=-1, type=float)
@click.pass_obj
def presets_set(cfg: Settings, amounts: Tuple[float, ...]) -> None:
    """Replace presets with AMOUNTS (non-positive values are dropped)."""
    dropped = [a for a in amounts if not validate_preset_amount(a)]
    if dropped:
        click.echo(f"Ignoring non-positive amounts: {', '.join(f'{a:g}' for a in dropped)}", err=True)
    session = app.build_session(cfg)
    saved = session.update_presets([Preset(title=f"{a:g}", amount=a) for a in amounts])
    for preset in saved:
        click.echo(f"{preset.title}\t{preset.amount:g}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
