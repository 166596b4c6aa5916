import argparse
import asyncio

from fairvalue_service.connectors import ConnectorFactory
from fairvalue_service.config import Settings
from fairvalue_service.services.lookup import Failed, LookupController
from fairvalue_service.services.presentation import build_analysis_view
from fairvalue_service.services.valuation import ValuationService


async def run(ticker: str, source: str, retries: int) -> int:
    connector = ConnectorFactory.get_connector(source)
    controller = LookupController(ValuationService(connector))

    print(f"Syncing dividend monitor for {ticker.strip().upper()} via '{source}'...")
    state = await controller.lookup(ticker)
    while isinstance(state, Failed) and retries > 0:
        print(f"Lookup failed ({state.error.kind.value}): {state.error}. Retrying...")
        retries -= 1
        state = await controller.retry()

    if isinstance(state, Failed):
        print(f"Error analyzing {state.ticker}: {state.error}")
        return 1

    view = build_analysis_view(state.analysis)
    stock = view.stock
    print(f"\n{stock.name} ({stock.ticker}) - {stock.region or 'N/A'}")
    print(f"Current Price: {stock.currency} {stock.current_price:,.2f}")
    print(f"EPS: {stock.eps:.2f}  BVPS: {stock.bvps:.2f}  5Y Avg Dividend: {stock.avg_dividend_5_years:.2f}")
    if stock.dividend_yield is not None:
        print(f"Dividend Yield: {stock.dividend_yield:.2f}%")

    print(f"\nNext payment: {view.dividends.next_payment} ({view.dividends.payout_frequency})")
    for payment in view.dividends.history:
        print(f"- {payment.date}: {stock.currency} {payment.amount:.2f} {payment.type or ''}".rstrip())
    if view.dividends.history_message:
        print(view.dividends.history_message)

    print("\nFair Values:")
    for card in view.indicators:
        print(
            f"{card.title} [{card.formula}]: {stock.currency} {card.fair_price:,.2f} "
            f"({card.upside:+.2f}%) {card.label.value}"
        )

    print(f"\n{view.diagnosis.title}: {view.diagnosis.message}")
    if view.sources:
        print("\nSources:")
        for link in view.sources:
            print(f"- {link.label}: {link.uri}")
    print(f"\n{view.disclaimer}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Compute Bazin and Graham fair values for a ticker.")
    parser.add_argument("ticker", type=str, help="The ticker symbol to analyze (e.g., 'BBAS3.SA', 'MC.PA')")
    parser.add_argument("--source", "-s", type=str, default=None, help="Data source connector (claude, yahoo)")
    parser.add_argument("--retries", "-r", type=int, default=0, help="Retry a failed lookup this many times")
    args = parser.parse_args()

    source = args.source or Settings.from_env().default_source
    raise SystemExit(asyncio.run(run(args.ticker, source, args.retries)))


if __name__ == "__main__":
    main()
