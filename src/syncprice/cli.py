import asyncio, logging, time
import click
import httpx
from rich.console import Console
from rich.logging import RichHandler

from .adapters.parquet_sink import ParquetPriceSink
from .adapters.rpc_httpx import HttpxRPC
from .adapters.tsv_sink import TSVPriceSink
from .application.use_cases import report_sync_prices
from .config import RPC_URL_ENV, Settings, load_rpc_url
from .domain.decoding import SYNC_SIGNATURE, SYNC_T0
from .errors import SyncPriceError
from .ports.rpc import RPCClient
from .ports.storage import PriceSink

# stdout carries TSV; everything else goes to stderr
console = Console(stderr=True)

def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=False, show_path=False)],
        force=True,
    )
    # keep transport chatter out of INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

@click.group()
def cli():
    """syncprice — Uniswap-V2 Sync events → per-event spot prices."""

@cli.command("topic")
def topic_cmd():
    """Print the topic0 used to filter Sync logs."""
    click.echo(f"{SYNC_SIGNATURE}\t{SYNC_T0}")

@cli.command("prices")
@click.option("--rpc", "rpc_url", default=None, help=f"RPC endpoint URL (default: ${RPC_URL_ENV})")
@click.option("--blocks", "lookback", type=click.IntRange(min=0), default=20, show_default=True,
              help="Scan the latest N blocks (ignored with --from-block)")
@click.option("--from-block", type=click.IntRange(min=0), default=None, help="Start of an explicit block range")
@click.option("--to-block", type=click.IntRange(min=0), default=None, help="End of the range (default: latest)")
@click.option("--step", type=click.IntRange(min=1), default=1_000, show_default=True, help="Blocks per eth_getLogs request")
@click.option("--out", type=click.Path(dir_okay=False), default=None, help="Write TSV here instead of stdout")
@click.option("--parquet-out", type=click.Path(dir_okay=False), default=None, help="Also write rows to a Parquet file")
@click.option("--context", type=click.Choice(["tx", "block"]), default="tx", show_default=True,
              help="Last column: transaction hash or block number")
@click.option("--concurrency", type=click.IntRange(min=1), default=1, show_default=True,
              help="Parallel pair resolutions (1 = fully sequential)")
@click.option("--timeout", "timeout_s", type=click.FloatRange(min=0, min_open=True), default=20.0, show_default=True,
              help="Per-request timeout in seconds")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default="WARNING", show_default=True)
def prices_cmd(rpc_url, lookback, from_block, to_block, step, out, parquet_out, context,
               concurrency, timeout_s, log_level):
    """Print token0/token1 spot prices for recent Sync events."""
    _setup_logging(log_level)
    try:
        settings = Settings(
            rpc_url=load_rpc_url(rpc_url), lookback=lookback, from_block=from_block, to_block=to_block,
            step=step, out=out, parquet_out=parquet_out, context=context,
            concurrency=concurrency, timeout_s=timeout_s,
        )
    except SyncPriceError as e:
        raise click.ClickException(str(e))

    try:
        res = asyncio.run(run(settings))
    except (SyncPriceError, httpx.HTTPError, OSError) as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")

    console.print(
        f"[bold]done[/]: {res['emitted']} rows • blocks {res['from_block']:,}-{res['to_block']:,} "
        f"• {res['elapsed_s']:.2f}s"
    )
    console.print(
        f"[bold]summary[/]: "
        f"logs={res['total_logs']}  "
        f"[green]emitted[/]={res['emitted']}  "
        f"[yellow]skipped[/]={res['skipped']}  "
        f"[red]undecodable[/]={res['undecodable']}  "
        f"pairs={res['pairs_resolved']}/{res['pairs_resolved'] + res['pairs_failed']}  "
        f"tokens={res['tokens_resolved']}/{res['tokens_resolved'] + res['tokens_failed']}  "
        f"eth_calls={res['eth_calls']}"
    )

def _make_rpc(settings: Settings) -> HttpxRPC:
    return HttpxRPC(settings.rpc_url, timeout_s=settings.timeout_s, max_conn=max(4, 2*settings.concurrency))

async def run(settings: Settings) -> dict:
    t0 = time.time()
    sinks: list[PriceSink] = []
    rpc: RPCClient | None = None
    try:
        sinks.append(TSVPriceSink(settings.out, context=settings.context))
        if settings.parquet_out:
            sinks.append(ParquetPriceSink(settings.parquet_out))
        rpc = _make_rpc(settings)
        res = await report_sync_prices(
            rpc=rpc, sinks=sinks,
            lookback=settings.lookback, from_block=settings.from_block, to_block=settings.to_block,
            step=settings.step, concurrency=settings.concurrency,
        )
    finally:
        for sink in sinks:
            await sink.close()
        if rpc is not None:
            await rpc.aclose()
    res["elapsed_s"] = time.time() - t0
    return res

if __name__ == "__main__":
    cli()
