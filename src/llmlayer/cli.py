"""LLMLayer command line.

Usage:
    llmlayer answer "What is SSE?" --model openai/gpt-4o-mini
    llmlayer answer "What is SSE?" --model openai/gpt-4o-mini --stream
    llmlayer web-search "python httpx"  --format json
    llmlayer scrape https://example.com

The API key is read from LLMLAYER_API_KEY unless --api-key is given.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

import click

from .client import LLMLayerClient
from .errors import LLMLayerError

# Output format options
FORMAT_TEXT = "text"
FORMAT_JSON = "json"


def truncate(text: str | None, max_len: int = 80) -> str:
    """Truncate text for display."""
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


@click.group()
@click.option(
    "--api-key", envvar="LLMLAYER_API_KEY", help="Account key (default: $LLMLAYER_API_KEY)"
)
@click.option("--base-url", default=None, help="Override the service address")
@click.option("--timeout", type=float, default=None, help="Whole-call timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    api_key: str | None,
    base_url: str | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """LLMLayer - search the web and answer questions from the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["client_options"] = {"api_key": api_key, "base_url": base_url, "timeout": timeout}


def _make_client(ctx: click.Context) -> LLMLayerClient:
    try:
        return LLMLayerClient(**ctx.obj["client_options"])
    except LLMLayerError as e:
        raise click.ClickException(str(e)) from e


def _run(client: LLMLayerClient, coro: Any) -> Any:
    async def run() -> Any:
        async with client:
            return await coro

    try:
        return asyncio.run(run())
    except LLMLayerError as e:
        raise click.ClickException(f"{e.kind.value}: {e}") from e


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@main.command()
@click.argument("query")
@click.option("--model", "-m", required=True, help="Model name, e.g. openai/gpt-4o-mini")
@click.option("--stream", "stream", is_flag=True, help="Print the answer as it is generated")
@click.option("--max-tokens", type=int, default=None, help="Answer token limit")
@click.option("--answer-type", type=click.Choice(["markdown", "html", "json"]), default=None)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TEXT, FORMAT_JSON]),
    default=FORMAT_TEXT,
    help="Output format",
)
@click.pass_context
def answer(
    ctx: click.Context,
    query: str,
    model: str,
    stream: bool,
    max_tokens: int | None,
    answer_type: str | None,
    output_format: str,
) -> None:
    """Answer QUERY using live web search.

    Examples:

        # Wait for the full answer
        llmlayer answer "latest python release" -m openai/gpt-4o-mini

        # Stream frames as JSON lines
        llmlayer answer "latest python release" -m openai/gpt-4o-mini --stream -f json
    """
    client = _make_client(ctx)
    params = {"max_tokens": max_tokens, "answer_type": answer_type}

    if not stream:
        result = _run(client, client.answer(query, model, **params))
        if output_format == FORMAT_JSON:
            _echo_json(result.model_dump(by_alias=True))
            return
        click.echo(result.answer if isinstance(result.answer, str) else json.dumps(result.answer))
        for i, source in enumerate(result.sources, 1):
            click.echo(f"[{i}] {truncate(source.get('title'))} {source.get('link', '')}")
        return

    async def consume() -> None:
        async for frame in client.answer_stream(query, model, **params):
            if output_format == FORMAT_JSON:
                click.echo(json.dumps(frame, ensure_ascii=False))
            elif frame.get("type") == "answer":
                click.echo(frame.get("content", ""), nl=False)
            elif frame.get("type") == "done":
                click.echo()

    _run(client, consume())


@main.command("web-search")
@click.argument("query")
@click.option(
    "--search-type", default="general", help="general, news, shopping, videos, images, scholar"
)
@click.option("--location", default=None, help="Country code, e.g. us")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TEXT, FORMAT_JSON]),
    default=FORMAT_TEXT,
    help="Output format",
)
@click.pass_context
def web_search(
    ctx: click.Context,
    query: str,
    search_type: str,
    location: str | None,
    output_format: str,
) -> None:
    """Run a raw web search for QUERY."""
    client = _make_client(ctx)
    result = _run(client, client.web_search(query, search_type=search_type, location=location))

    if output_format == FORMAT_JSON:
        _echo_json(result.model_dump(by_alias=True))
        return

    if not result.results:
        click.echo("No results.")
        return
    for item in result.results:
        click.echo(f"{truncate(item.get('title'), 60):<60}  {item.get('link', '')}")


@main.command()
@click.argument("url")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TEXT, FORMAT_JSON]),
    default=FORMAT_TEXT,
    help="Output format",
)
@click.pass_context
def scrape(ctx: click.Context, url: str, output_format: str) -> None:
    """Scrape URL and print it as markdown."""
    client = _make_client(ctx)
    result = _run(client, client.scrape(url, formats=["markdown"]))

    if output_format == FORMAT_JSON:
        _echo_json(result.model_dump(by_alias=True))
    else:
        click.echo(result.markdown)


if __name__ == "__main__":
    main()
