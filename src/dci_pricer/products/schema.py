"""
Pydantic schema for Dual Currency Investment (DCI) products.

A DCI is a foreign currency deposit combined with a sold put on the
foreign currency. Amounts are Decimal; market inputs are float.
"""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dci_pricer.core.numerics import to_decimal


# ============================================================================
# Market quote
# ============================================================================

class FxQuote(BaseModel):
    """Two-way FX quote in domestic units per one foreign unit."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bid: Decimal = Field(..., gt=0, description="Bid rate")
    ask: Decimal = Field(..., gt=0, description="Ask rate")

    @model_validator(mode='after')
    def validate_spread(self) -> 'FxQuote':
        """Ask must not be below bid."""
        if self.ask < self.bid:
            raise ValueError(f"ask {self.ask} is below bid {self.bid}")
        return self

    @property
    def mid(self) -> Decimal:
        return (self.bid + self.ask) / 2

    @property
    def spread(self) -> Decimal:
        return self.ask - self.bid

    @classmethod
    def from_mid(
        cls,
        mid: Union[Decimal, float, str],
        half_spread: Union[Decimal, float, str] = Decimal("0.01")
    ) -> 'FxQuote':
        """Symmetric quote around a mid rate."""
        m, h = to_decimal(mid), to_decimal(half_spread)
        return cls(bid=m - h, ask=m + h)


# ============================================================================
# DCI input and results
# ============================================================================

class DciInput(BaseModel):
    """
    Everything needed to quote one DCI.

    The investor deposits `notional_foreign` of the foreign currency and
    is converted into the domestic currency at `strike` if the spot
    fixes at or below the strike at maturity.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    notional_foreign: Decimal = Field(..., gt=0, description="Deposit amount in foreign currency")
    spot: FxQuote
    strike: Decimal = Field(..., gt=0, description="Conversion rate")
    rate_domestic: float = Field(..., ge=-0.20, le=0.50, description="Domestic continuous rate")
    rate_foreign: float = Field(..., ge=-0.20, le=0.50, description="Foreign continuous rate")
    volatility: float = Field(..., gt=0, le=5.0, description="Implied volatility")
    tenor_in_years: float = Field(..., gt=0, le=100, description="Time to maturity in years")
    deposit_rate_annual: float = Field(..., ge=-0.20, le=0.50, description="Plain deposit rate")
    currency_pair: Optional[str] = Field(default=None, description="e.g. 'USD/TWD'")

    def _replace(self, **changes: Any) -> 'DciInput':
        data = self.model_dump()
        data.update(changes)
        return DciInput.model_validate(data)

    def with_strike(self, strike: Union[Decimal, float, str]) -> 'DciInput':
        return self._replace(strike=to_decimal(strike))

    def with_spot(self, spot: FxQuote) -> 'DciInput':
        return self._replace(spot=spot.model_dump())

    def with_volatility(self, volatility: float) -> 'DciInput':
        return self._replace(volatility=volatility)

    @property
    def spot_mid(self) -> Decimal:
        return self.spot.mid


class DciQuoteResult(BaseModel):
    """Interest breakdown of a DCI quote, amounts in foreign currency."""

    model_config = ConfigDict(frozen=True)

    strike: Decimal
    notional_foreign: Decimal
    interest_from_deposit: Decimal
    interest_from_option: Decimal
    total_interest_foreign: Decimal
    coupon_annual: float
    option_premium: float = Field(..., description="Put premium, domestic per foreign unit")


class DciPayoffResult(BaseModel):
    """Settlement of a DCI at maturity."""

    model_config = ConfigDict(frozen=True)

    is_knocked_in: bool
    payoff_foreign: Optional[Decimal] = None
    payoff_domestic: Optional[Decimal] = None
    final_spot: Decimal
    strike: Decimal

    @model_validator(mode='after')
    def validate_currency_leg(self) -> 'DciPayoffResult':
        """Exactly one settlement leg is populated."""
        if self.is_knocked_in and self.payoff_domestic is None:
            raise ValueError("knocked-in payoff requires payoff_domestic")
        if not self.is_knocked_in and self.payoff_foreign is None:
            raise ValueError("payoff without knock-in requires payoff_foreign")
        return self


# ============================================================================
# Market data snapshot
# ============================================================================

# Sanity bands for check_quality(); looser than hard validation
MAX_SPREAD_FRACTION = Decimal("0.01")
QUALITY_MIN_VOL = 0.01
QUALITY_MAX_VOL = 2.0
QUALITY_MAX_AGE_SECONDS = 300


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MarketDataValidationResult(BaseModel):
    """Outcome of a market data quality check."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class MarketDataSnapshot(BaseModel):
    """
    Spot, rates and vol for one currency pair at a point in time.

    Hard constraints (positive spot, vol in (0, 5]) are enforced on
    construction; softer sanity bands are reported by check_quality().
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    currency_pair: str = Field(..., description="e.g. 'USD/TWD'")
    spot: FxQuote
    rate_domestic: float
    rate_foreign: float
    volatility: float = Field(..., gt=0, le=5.0)
    timestamp_utc: datetime = Field(default_factory=_utc_now)
    forward_points: Optional[Decimal] = None
    data_source: Optional[str] = None
    is_real_time: bool = True

    @field_validator('currency_pair')
    @classmethod
    def validate_currency_pair(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("currency_pair must not be blank")
        return v

    @classmethod
    def mock(
        cls,
        currency_pair: str = "USD/TWD",
        spot_mid: Union[Decimal, float, str] = Decimal("30.50"),
        spread_pips: Union[Decimal, float, str] = Decimal("2"),
        rate_domestic: float = 0.015,
        rate_foreign: float = 0.05,
        volatility: float = 0.10
    ) -> 'MarketDataSnapshot':
        """Delayed snapshot for tests and examples; spread in 0.01 pips."""
        half = to_decimal(spread_pips) * Decimal("0.01") / 2
        return cls(
            currency_pair=currency_pair,
            spot=FxQuote.from_mid(spot_mid, half),
            rate_domestic=rate_domestic,
            rate_foreign=rate_foreign,
            volatility=volatility,
            data_source="Mock",
            is_real_time=False,
        )

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or _utc_now()) - self.timestamp_utc).total_seconds()

    def is_stale(self, max_age_seconds: float = 60, now: Optional[datetime] = None) -> bool:
        """True if the snapshot is older than `max_age_seconds`."""
        return self.age_seconds(now) > max_age_seconds

    def forward(self, tenor_in_years: float) -> Decimal:
        """Covered interest parity forward: S * exp((rd - rf) * T)."""
        if tenor_in_years <= 0:
            raise ValueError(f"tenor_in_years must be positive, got {tenor_in_years}")
        growth = math.exp((self.rate_domestic - self.rate_foreign) * tenor_in_years)
        return to_decimal(float(self.spot.mid) * growth)

    def forward_points_for(self, tenor_in_years: float) -> Decimal:
        """Forward minus spot mid."""
        return self.forward(tenor_in_years) - self.spot.mid

    def check_quality(self, now: Optional[datetime] = None) -> MarketDataValidationResult:
        """Collect every sanity violation rather than stopping at the first."""
        errors: List[str] = []
        spot = self.spot

        if spot.bid >= spot.ask:
            errors.append(f"Spot bid {spot.bid} must be below ask {spot.ask}")
        spread_fraction = spot.spread / spot.mid
        if spread_fraction > MAX_SPREAD_FRACTION:
            errors.append(f"Spot spread too wide: {spread_fraction:.2%}")

        for name, rate in (("Domestic", self.rate_domestic), ("Foreign", self.rate_foreign)):
            if not (-0.20 <= rate <= 0.50):
                errors.append(f"{name} rate out of range: {rate:.2%}")

        if not (QUALITY_MIN_VOL <= self.volatility <= QUALITY_MAX_VOL):
            errors.append(f"Volatility out of range: {self.volatility:.2%}")

        age = self.age_seconds(now)
        if age > QUALITY_MAX_AGE_SECONDS:
            errors.append(f"Data is stale: {age / 60:.1f} minutes old")

        return MarketDataValidationResult(is_valid=not errors, errors=errors)

    def to_dci_input(
        self,
        notional_foreign: Union[Decimal, float, str],
        strike: Union[Decimal, float, str],
        tenor_in_years: float,
        deposit_rate_annual: float
    ) -> DciInput:
        """DCI input priced off this snapshot."""
        return DciInput(
            notional_foreign=to_decimal(notional_foreign),
            spot=self.spot,
            strike=to_decimal(strike),
            rate_domestic=self.rate_domestic,
            rate_foreign=self.rate_foreign,
            volatility=self.volatility,
            tenor_in_years=tenor_in_years,
            deposit_rate_annual=deposit_rate_annual,
            currency_pair=self.currency_pair,
        )


# ============================================================================
# Loading and validation functions
# ============================================================================

def load_dci_input(path: Union[str, Path]) -> DciInput:
    """
    Load and validate a DCI input from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If JSON doesn't match schema
    """
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"DCI input not found: {path}")

    with open(filepath, "r") as f:
        data = json.load(f)

    return DciInput.model_validate(data)


def validate_dci_input_json(data: Dict[str, Any]) -> DciInput:
    """Validate a DCI input dictionary."""
    return DciInput.model_validate(data)
