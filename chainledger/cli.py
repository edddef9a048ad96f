"""Typer CLI interface for chainledger."""

import logging
from datetime import datetime
from pathlib import Path

import typer

from chainledger.models.enums import OutputFormat

app = typer.Typer(
    name="chainledger",
    help="chainledger: FIFO cost basis and swap positions for on-chain accounts.",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """chainledger: FIFO cost basis and swap positions for on-chain accounts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _load_context(configs: list[Path]):
    from chainledger.context import RunContext
    from chainledger.ingestion import ConfigLoader

    context = RunContext()
    loader = ConfigLoader(context)
    for path in configs:
        loader.load(path)
    return context


@app.command()
def check(
    configs: list[Path] = typer.Argument(..., help="Config files to load, in order"),
) -> None:
    """Load config files and show the tracked accounts and token allow-list."""
    from rich.console import Console
    from rich.table import Table

    from chainledger.exceptions import LedgerError

    try:
        context = _load_context(configs)
    except LedgerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    console = Console()
    accounts = Table(title="Tracked accounts")
    accounts.add_column("Address")
    accounts.add_column("Label")
    accounts.add_column("Start block", justify="right")
    for account in context.accounts.tracked_accounts():
        accounts.add_row(account.address, account.label, str(account.start_block))
    console.print(accounts)

    if len(context.tokens):
        tokens = Table(title="Token allow-list")
        tokens.add_column("Contract")
        tokens.add_column("Symbol")
        tokens.add_column("Decimals", justify="right")
        for token in context.tokens.tokens():
            tokens.add_row(token.address, token.symbol, str(token.decimals))
        console.print(tokens)

    hidden = context.accounts.hidden_addresses()
    if hidden:
        typer.echo(f"Hidden: {len(hidden)} address(es)")
    if not context.options.api_key():
        typer.echo("Warning: no Etherscan API key configured", err=True)


@app.command()
def process(
    configs: list[Path] = typer.Argument(..., help="Config files to load, in order"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.POSITIONS, "--format", "-f", help="Output format"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write output to this file"),
    start_date: datetime | None = typer.Option(None, "--start-date", help="Ignore transfers before"),
    end_date: datetime | None = typer.Option(None, "--end-date", help="Ignore transfers after"),
    prices_file: Path | None = typer.Option(
        None, "--prices", help="JSON price history consulted before CoinGecko"
    ),
    include_fees: bool = typer.Option(False, "--include-fees", help="Book network fees"),
    lenient: bool = typer.Option(
        False, "--lenient", help="Report failing commodities instead of aborting"
    ),
) -> None:
    """Fetch transfers for tracked accounts and compute FIFO gains and positions."""
    from chainledger.engines import AccountingPipeline, PriceResolver, SelectorClassifier
    from chainledger.exceptions import ConfigError, LedgerError
    from chainledger.ingestion import CoinGeckoClient, EtherscanClient, StaticPriceHistory
    from chainledger.reports import PositionsReportGenerator, TradesheetWriter, export_json

    try:
        context = _load_context(configs)
        options = context.options
        if start_date is not None:
            options.start_date = start_date
        if end_date is not None:
            options.end_date = end_date
        if include_fees:
            options.include_fees = True
        options.strict = not lenient
        options.format = output_format
        options.output = output

        api_key = options.api_key()
        if not api_key:
            raise ConfigError("options", "no Etherscan API key; set etherscanApiKey or ETHERSCAN_API_KEY")

        coingecko = CoinGeckoClient()
        if prices_file is not None:
            primary, fallback = StaticPriceHistory.from_json(prices_file), coingecko
        else:
            primary, fallback = coingecko, None
        context.prices = PriceResolver(primary, fallback, tokens=context.tokens)

        etherscan = EtherscanClient(api_key, options.etherscan_url, options.end_block)
        pipeline = AccountingPipeline(context, etherscan, etherscan, SelectorClassifier())
        result = pipeline.run()
    except LedgerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if output_format == OutputFormat.CSV:
        rendered = TradesheetWriter().render(result.movements)
    elif output_format == OutputFormat.JSON:
        rendered = export_json(result)
    else:
        rendered = PositionsReportGenerator().render(result)

    if output is not None:
        output.write_text(rendered)
        typer.echo(f"Wrote {output_format.value} output to {output}", err=True)
    else:
        typer.echo(rendered)

    _print_summary(result)
    for symbol, error in result.failed_symbols.items():
        typer.echo(f"Warning: {symbol} abandoned: {error}", err=True)


def _print_summary(result) -> None:
    """Realized gains per commodity, on stderr so piped output stays clean."""
    from rich.console import Console
    from rich.table import Table

    from chainledger.reports.positions import money, quantity

    table = Table(title="Realized gains")
    table.add_column("Commodity")
    table.add_column("Matched sells", justify="right")
    table.add_column("Sold cost", justify="right")
    table.add_column("Gains", justify="right")
    table.add_column("Remaining", justify="right")
    for symbol in sorted(result.ledgers):
        ledger = result.ledgers[symbol]
        table.add_row(
            symbol,
            str(len(ledger.sells)),
            money(ledger.total_cost),
            money(ledger.total_gains),
            "failed" if ledger.error else quantity(ledger.remaining_inventory),
        )
    Console(stderr=True).print(table)


if __name__ == "__main__":
    app()
