"""CLI interface for fetchwise"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
import requests

from fetchwise.application.fetch_service import FetchClient
from fetchwise.domain.config import FetchConfig
from fetchwise.domain.models.events import PageEvent, RetryEvent
from fetchwise.infrastructure.config.config_manager import ConfigManager
from fetchwise.infrastructure.retry import is_success

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def parse_headers(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ``Name: value`` header options

    Args:
        values: Raw header strings from the command line

    Returns:
        Header dictionary

    Raises:
        click.BadParameter: If a header has no colon or an empty name
    """
    headers: Dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"Header must look like 'Name: value', got {raw!r}")
        headers[name.strip()] = value.strip()
    return headers


def _load_config(ctx: click.Context, overrides: Dict[Optional[str], Dict]) -> FetchConfig:
    """Load configuration and apply CLI overrides

    Args:
        ctx: Click context holding the config path
        overrides: Section -> field overrides; None values are skipped

    Returns:
        Validated configuration
    """
    config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    config_dict = config_manager.config.model_dump()
    for section, values in overrides.items():
        for key, value in values.items():
            if value is None:
                continue
            if section:
                config_dict[section][key] = value
            else:
                config_dict[key] = value
    return FetchConfig(**config_dict)


def _report_retry(event: RetryEvent) -> None:
    click.echo(
        f"Retry {event.attempt}/{event.max_attempts} after HTTP {event.status_code} "
        f"{event.status_text}, waiting {event.retry_after:.1f}s",
        err=True,
    )


def _report_page(event: PageEvent) -> None:
    click.echo(f"Page {event.page} done, next: {event.next_url}", err=True)


def _output_response(response: requests.Response, show_body: bool) -> None:
    click.echo(f"{response.status_code} {response.reason} {response.url}")
    if show_body:
        click.echo(response.text)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .fetchwise.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """fetchwise - HTTP requests with retry and pagination"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("url", type=str)
@click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")
@click.option("--header", "-H", "headers", multiple=True, help="Request header, 'Name: value'")
@click.option("--max-attempts", type=click.IntRange(min=0), help="Maximum retries. Overrides config.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Overall timeout in seconds. Overrides config.")
@click.option("--body/--no-body", default=True, help="Print the response body")
@click.pass_context
def get(
    ctx,
    url: str,
    method: str,
    headers: Tuple[str, ...],
    max_attempts: Optional[int],
    timeout: Optional[float],
    body: bool,
):
    """Fetch a single resource with retry.

    URL: Resource to fetch
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        config = _load_config(
            ctx, {"retry": {"max_attempts": max_attempts}, None: {"timeout": timeout}}
        )
        client = FetchClient(config, on_retry=_report_retry)
        response = client.fetch(url, method, headers=parse_headers(headers))
        _output_response(response, body)
        if not is_success(response.status_code):
            ctx.exit(1)
    except (click.ClickException, click.exceptions.Exit):
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)


@cli.command()
@click.argument("url", type=str)
@click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")
@click.option("--header", "-H", "headers", multiple=True, help="Request header, 'Name: value'")
@click.option("--max-pages", type=click.IntRange(min=1), help="Maximum pages to fetch. Overrides config.")
@click.option("--pause", type=click.FloatRange(min=0), help="Pause between pages in seconds. Overrides config.")
@click.option(
    "--fail-on-bad-link/--no-fail-on-bad-link",
    default=None,
    help="Fail on a malformed Link header instead of stopping. Overrides config.",
)
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Overall timeout in seconds. Overrides config.")
@click.option("--body/--no-body", default=False, help="Print each page body")
@click.pass_context
def paginate(
    ctx,
    url: str,
    method: str,
    headers: Tuple[str, ...],
    max_pages: Optional[int],
    pause: Optional[float],
    fail_on_bad_link: Optional[bool],
    timeout: Optional[float],
    body: bool,
):
    """Fetch every page of a Link header paginated resource.

    URL: First page to fetch
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        config = _load_config(
            ctx,
            {
                "paginate": {
                    "max_pages": max_pages,
                    "pause": pause,
                    "fail_on_bad_link_header": fail_on_bad_link,
                },
                None: {"timeout": timeout},
            },
        )
        client = FetchClient(config, on_retry=_report_retry, on_page=_report_page)
        responses = client.fetch_paginate(url, method, headers=parse_headers(headers))
        for response in responses:
            _output_response(response, body)
        click.echo(f"\nFetched {len(responses)} page(s)")
        if responses and not is_success(responses[-1].status_code):
            ctx.exit(1)
    except (click.ClickException, click.exceptions.Exit):
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
