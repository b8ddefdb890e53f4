"""CLI entry point for the near-event-agent MCP server."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from near_event_agent.config import load_config, validate_config
from near_event_agent.models.config import AgentConfig


def _mask(key: str) -> str:
    if not key:
        return "(not set)"
    scheme, _, _ = key.partition(":")
    return f"{scheme}:***configured***" if scheme != key else "***configured***"


def _require_valid(cfg: AgentConfig) -> None:
    """Exit with error if the configuration cannot run the agent."""
    problems = validate_config(cfg)
    if problems:
        for problem in problems:
            click.echo(f"Error: {problem}", err=True)
        click.echo("Set NEAR_AGENT_* env vars or the [near] section of the config.", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """near-event-agent - AI responder for NEAR contract events, served over MCP."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _configure_logging(cfg: AgentConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose or cfg.debug else getattr(
        logging, cfg.log_level.upper(), logging.INFO,
    )
    # stderr only: stdout carries the MCP stdio transport
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


# ── Server ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Serve the event-watching tools over MCP stdio."""
    from near_event_agent.tools.server import run_server

    cfg = load_config(ctx.obj["config_path"])
    _configure_logging(cfg, ctx.obj["verbose"])
    _require_valid(cfg)

    click.echo(f"Starting near-event-agent (network: {cfg.network})", err=True)
    asyncio.run(run_server(cfg))


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = load_config(ctx.obj["config_path"])
    click.echo(f"Network:          {cfg.network}")
    click.echo(f"RPC URL:          {cfg.rpc_url}")
    click.echo(f"Explorer:         {cfg.resolved_explorer_url()}")
    click.echo(f"Account:          {cfg.account_id or '(not set)'}")
    click.echo(f"Key:              {_mask(cfg.account_key)}")
    click.echo(f"Gas limit:        {cfg.gas_limit}")
    click.echo(f"Default cron:     {cfg.cron_expression}")
    click.echo(f"Response method:  {cfg.response_method}")
    click.echo(f"Sampling timeout: {cfg.sampling_timeout:g}s")
    click.echo(f"Batch:            {cfg.batch_size} blocks, {cfg.batch_delay:g}s apart")
    click.echo(f"Log level:        {cfg.log_level}")

    problems = validate_config(cfg)
    if problems:
        click.echo("")
        for problem in problems:
            click.echo(f"Warning: {problem}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
