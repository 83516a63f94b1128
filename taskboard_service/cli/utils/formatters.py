"""Output formatting utilities for CLI commands."""

import click


def success(message: str) -> None:
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Errors go to stderr so piped output stays clean."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def header(message: str) -> None:
    click.secho(f"\n{message}", fg="cyan", bold=True)


def bullet(label: str, value: object, *, width: int = 0) -> None:
    """Indented ``label: value`` line, label padded to ``width``."""
    click.echo(f"  {label + ':':<{width + 1}} {value}")
