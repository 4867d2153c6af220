"""
karinstall — CLI entrypoint.

Usage:
    python -m karinstall --help
    python -m karinstall install
    python -m karinstall config check
    python -m karinstall inspect features.xml
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from karinstall import __version__
from karinstall.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="karinstall")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to assembly.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """karinstall — assemble a Karaf runtime image from kars and features."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("KARINSTALL_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("KARINSTALL_LOG_FILE"),
        log_file_level=os.environ.get("KARINSTALL_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, as_json: bool) -> None:
    """Install kar and features dependencies into the assembly."""
    from karinstall.core.models.features import Tier
    from karinstall.core.use_cases.install import install_kars

    result = install_kars(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.settings is not None and result.stats is not None
    if ctx.obj.get("quiet"):
        return

    click.secho(f"\n📦 {result.settings.system_dir}", fg="cyan", bold=True)
    click.echo(f"   Repositories: {len(result.repositories)}")
    for uri in result.repositories:
        click.echo(f"     • {uri}")

    click.echo()
    click.secho("   Features:", fg="white", bold=True)
    for tier in Tier:
        names = result.features_in(tier)
        if names:
            click.echo(f"     {tier.value:<10} {', '.join(names)}")

    click.echo()
    click.echo(f"   Artifacts copied: {len(result.stats.installed)}")
    if ctx.obj.get("verbose"):
        for path in result.stats.installed:
            click.echo(f"     + {path}")
    if result.stats.skipped_bundles:
        click.echo(f"   Dependency bundles skipped: {len(result.stats.skipped_bundles)}")

    if result.stats.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.stats.warnings:
            click.echo(f"   • {warn}")

    click.echo()


@cli.group()
def config() -> None:
    """Assembly configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate assembly.yml configuration."""
    from karinstall.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.settings is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   System directory: {result.settings.system_dir}")
        click.echo(f"   Input artifacts: {len(result.settings.dependencies)}")
        click.echo(f"   Default start level: {result.settings.default_start_level}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


@cli.command()
@click.argument("descriptor", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def inspect(descriptor: Path, as_json: bool) -> None:
    """List the repositories and features a features descriptor declares."""
    from karinstall.core.use_cases.inspect import inspect_descriptor

    result = inspect_descriptor(descriptor)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    repo = result.repository
    assert repo is not None
    click.secho(f"\n📋 {repo.name or descriptor.name}", fg="cyan", bold=True)
    if repo.repositories:
        click.secho(f"   Repositories: {len(repo.repositories)}", fg="white", bold=True)
        for uri in repo.repositories:
            click.echo(f"     • {uri}")
    click.secho(f"   Features: {len(repo.features)}", fg="white", bold=True)
    for feature in repo.features:
        deps = f"  ← {', '.join(d.name for d in feature.dependencies)}" if feature.dependencies else ""
        click.echo(f"     • {feature.label} ({len(feature.bundles)} bundles){deps}")
    click.echo()


if __name__ == "__main__":
    cli()
