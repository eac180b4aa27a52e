"""Product definitions: DCI schema and market data snapshots."""

from dci_pricer.products.schema import (
    FxQuote,
    DciInput,
    DciQuoteResult,
    DciPayoffResult,
    MarketDataSnapshot,
    MarketDataValidationResult,
    load_dci_input,
    validate_dci_input_json,
)

__all__ = [
    "FxQuote",
    "DciInput",
    "DciQuoteResult",
    "DciPayoffResult",
    "MarketDataSnapshot",
    "MarketDataValidationResult",
    "load_dci_input",
    "validate_dci_input_json",
]
