"""Pricing engines: closed-form Garman-Kohlhagen / Black-Scholes."""

from dci_pricer.engines.black_scholes import (
    OptionType,
    PricingInputs,
    GreeksResult,
    VanillaResult,
    ImpliedVolConfig,
    gk_price,
    bs_price,
    gk_price_with_discount_factors,
    gk_price_with_curves,
    gk_greeks,
    gk_implied_vol,
    bs_implied_vol,
    price_vanilla,
)

__all__ = [
    "OptionType",
    "PricingInputs",
    "GreeksResult",
    "VanillaResult",
    "ImpliedVolConfig",
    "gk_price",
    "bs_price",
    "gk_price_with_discount_factors",
    "gk_price_with_curves",
    "gk_greeks",
    "gk_implied_vol",
    "bs_implied_vol",
    "price_vanilla",
]
