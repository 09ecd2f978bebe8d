"""CLI entry point for shophub-2fa."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from shophub_2fa.auth.totp import MAX_TOLERANCE
from shophub_2fa.errors import DecodeError, RandomSourceError

console = Console()


def _engine(ctx: click.Context):
    from shophub_2fa.auth.totp import TotpEngine

    return TotpEngine.from_settings(ctx.obj["settings"])


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML settings overlay.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """ShopHub two-factor authentication tools."""
    from shophub_2fa.config import load_settings

    try:
        cfg = load_settings(config_path)
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e

    logging.basicConfig(
        level=logging.DEBUG if verbose else cfg.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = cfg


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show effective settings."""
    cfg = ctx.obj["settings"]
    console.print("[bold]ShopHub 2FA Settings[/bold]")
    console.print(f"  Issuer: {cfg.app_name}")
    console.print(f"  QR endpoint: {cfg.qr_endpoint} ({cfg.qr_size})")
    console.print(f"  Secret length: {cfg.secret_bytes} bytes")
    console.print(f"  Time tolerance: ±{cfg.time_tolerance} step(s)")
    console.print(f"  Master key: {'set' if cfg.master_key else 'not set'}")


@main.command()
@click.option("--bytes", "byte_length", type=int, default=None, help="Random bytes in the secret.")
@click.pass_context
def secret(ctx: click.Context, byte_length: int | None) -> None:
    """Generate a new Base32 secret."""
    try:
        click.echo(_engine(ctx).generate_secret(byte_length))
    except (RandomSourceError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("secret")
@click.argument("account")
@click.option("--issuer", default=None, help="Issuer shown in the authenticator app.")
@click.option("--otpauth", is_flag=True, help="Print the bare otpauth:// URI instead.")
@click.pass_context
def url(ctx: click.Context, secret: str, account: str, issuer: str | None, otpauth: bool) -> None:
    """Print the enrollment QR URL for SECRET and ACCOUNT."""
    engine = _engine(ctx)
    if otpauth:
        click.echo(engine.otpauth_uri(secret, account, issuer))
    else:
        click.echo(engine.build_enrollment_url(secret, account, issuer))


@main.command()
@click.argument("secret")
@click.pass_context
def code(ctx: click.Context, secret: str) -> None:
    """Print the current code for SECRET."""
    try:
        click.echo(_engine(ctx).current_code(secret))
    except DecodeError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("secret")
@click.pass_context
def seal(ctx: click.Context, secret: str) -> None:
    """Encrypt SECRET with the configured master key for the user store."""
    from shophub_2fa.crypto import SecretSealer

    try:
        click.echo(SecretSealer.from_settings(ctx.obj["settings"]).seal(secret.strip().upper()))
    except (RuntimeError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("secret")
@click.argument("submitted")
@click.option("--tolerance", type=click.IntRange(0, MAX_TOLERANCE), default=None, help="Adjacent steps accepted.")
@click.pass_context
def verify(ctx: click.Context, secret: str, submitted: str, tolerance: int | None) -> None:
    """Check SUBMITTED against SECRET. Exits 1 if rejected."""
    if _engine(ctx).verify(secret, submitted, tolerance):
        console.print("[green]Code accepted[/green]")
    else:
        console.print("[red]Code rejected[/red]")
        ctx.exit(1)


if __name__ == "__main__":
    main()
