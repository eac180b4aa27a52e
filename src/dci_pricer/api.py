"""
FastAPI wrapper for the DCI pricer.

Provides HTTP endpoints for vanilla FX pricing, implied volatility,
curve bootstrapping, DCI quoting and strike solving.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
import math

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from dci_pricer import __version__
from dci_pricer.core.errors import NonConvergenceError, PricerError
from dci_pricer.engines.black_scholes import (
    OptionType,
    PricingInputs,
    gk_implied_vol,
    price_vanilla,
)
from dci_pricer.market.bootstrap import build_standard_curve
from dci_pricer.market.curves import InterpolationMethod
from dci_pricer.pricers.dci import DciPricer
from dci_pricer.pricers.strike_solver import dci_strike_ladder, solve_dci_strike
from dci_pricer.products.schema import DciInput, DciQuoteResult


app = FastAPI(
    title="DCI Pricer API",
    description="API for FX option and Dual Currency Investment pricing",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==============================================================================
# Request/Response Models
# ==============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class VanillaPriceRequest(BaseModel):
    """Request for vanilla FX option pricing."""
    spot: float = Field(..., gt=0, description="Spot rate")
    strike: float = Field(..., gt=0, description="Strike rate")
    time_to_expiry: float = Field(..., gt=0, le=100, description="Time to expiry in years")
    rate_domestic: float = Field(..., description="Domestic continuous rate")
    rate_foreign: float = Field(default=0.0, description="Foreign continuous rate")
    volatility: float = Field(..., gt=0, le=5.0, description="Volatility")
    option_type: OptionType = OptionType.CALL


class VanillaPriceResponse(BaseModel):
    """Response from vanilla pricing."""
    price: float
    delta: float
    gamma: float
    vega: float
    theta: float
    rho_domestic: float
    rho_foreign: float


class ImpliedVolRequest(BaseModel):
    """Request for implied volatility calculation."""
    price: float = Field(..., description="Option market price")
    spot: float = Field(..., gt=0, description="Spot rate")
    strike: float = Field(..., gt=0, description="Strike rate")
    time_to_expiry: float = Field(..., gt=0, le=100, description="Time to expiry in years")
    rate_domestic: float = Field(..., description="Domestic continuous rate")
    rate_foreign: float = Field(default=0.0, description="Foreign continuous rate")
    option_type: OptionType = OptionType.CALL
    initial_guess: float = Field(default=0.15, gt=0)


class ImpliedVolResponse(BaseModel):
    """Response from implied volatility calculation."""
    implied_vol: Optional[float]
    converged: bool


class BootstrapRequest(BaseModel):
    """Request for curve bootstrapping from tenor quotes."""
    curve_name: str = Field(..., min_length=1)
    reference_date: date
    quotes: Dict[str, float] = Field(..., min_length=1, description="e.g. {'3M': 0.015}")
    interpolation: InterpolationMethod = InterpolationMethod.LINEAR
    sample_tenors: List[float] = Field(default_factory=lambda: [0.25, 0.5, 1.0, 2.0, 5.0])


class CurveSample(BaseModel):
    """Curve values at one tenor."""
    tenor: float
    zero_rate: float
    discount_factor: float


class BootstrapResponse(BaseModel):
    """Bootstrapped curve pillars and samples."""
    curve_name: str
    interpolation: InterpolationMethod
    pillars: List[CurveSample]
    samples: List[CurveSample]


class SolveStrikeRequest(BaseModel):
    """Request for DCI strike solving."""
    dci: DciInput
    target_coupon: float = Field(..., description="Annualized coupon target")
    initial_guess: Optional[Decimal] = Field(default=None, gt=0)


class SolveStrikeResponse(BaseModel):
    """Solved strike and the quote at that strike."""
    strike: Decimal
    quote: DciQuoteResult


class StrikeLadderRequest(BaseModel):
    """Request for a coupon ladder across strikes."""
    dci: DciInput
    count: int = Field(default=10, ge=2, le=200)
    min_ratio: Decimal = Field(default=Decimal("0.95"), gt=0)
    max_ratio: Decimal = Field(default=Decimal("1.00"), gt=0)


class LadderRung(BaseModel):
    """One strike on the ladder."""
    strike: Decimal
    coupon_annual: float


# ==============================================================================
# Endpoints
# ==============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/vanilla/price", response_model=VanillaPriceResponse)
async def price_vanilla_option(request: VanillaPriceRequest):
    """Price a European FX option with Garman-Kohlhagen."""
    try:
        inputs = PricingInputs(
            spot=request.spot,
            strike=request.strike,
            rate_domestic=request.rate_domestic,
            rate_foreign=request.rate_foreign,
            volatility=request.volatility,
            time_to_maturity=request.time_to_expiry,
        )
        result = price_vanilla(inputs, request.option_type)
    except PricerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    g = result.greeks
    return VanillaPriceResponse(
        price=result.price,
        delta=g.delta,
        gamma=g.gamma,
        vega=g.vega,
        theta=g.theta,
        rho_domestic=g.rho_domestic,
        rho_foreign=g.rho_foreign,
    )


@app.post("/vanilla/implied-vol", response_model=ImpliedVolResponse)
async def calculate_implied_vol(request: ImpliedVolRequest):
    """
    Calculate implied volatility from an option price.

    Returns a null implied vol when the solver does not converge.
    """
    try:
        iv = gk_implied_vol(
            market_price=request.price,
            spot=request.spot,
            strike=request.strike,
            rate_domestic=request.rate_domestic,
            rate_foreign=request.rate_foreign,
            time_to_maturity=request.time_to_expiry,
            option_type=request.option_type,
            initial_guess=request.initial_guess,
        )
    except PricerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    converged = not math.isnan(iv)
    return ImpliedVolResponse(implied_vol=iv if converged else None, converged=converged)


@app.post("/curves/bootstrap", response_model=BootstrapResponse)
async def bootstrap_curve(request: BootstrapRequest):
    """Bootstrap a zero curve from deposit and swap quotes."""
    try:
        curve = build_standard_curve(
            request.curve_name,
            request.reference_date,
            request.quotes,
            interpolation=request.interpolation,
        )
        samples = [
            CurveSample(tenor=t, zero_rate=curve.zero_rate(t), discount_factor=curve.discount_factor(t))
            for t in request.sample_tenors
        ]
    except PricerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BootstrapResponse(
        curve_name=curve.name,
        interpolation=curve.interpolation,
        pillars=[
            CurveSample(tenor=p.tenor, zero_rate=p.zero_rate, discount_factor=p.discount_factor)
            for p in curve.points
        ],
        samples=samples,
    )


@app.post("/dci/quote", response_model=DciQuoteResult)
async def quote_dci(dci: DciInput):
    """Quote a DCI at its strike."""
    try:
        return DciPricer().quote(dci)
    except PricerError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/dci/solve-strike", response_model=SolveStrikeResponse)
async def solve_strike_endpoint(request: SolveStrikeRequest):
    """Find the strike that pays the target coupon."""
    pricer = DciPricer()
    try:
        strike = solve_dci_strike(
            request.dci, request.target_coupon, pricer, initial_guess=request.initial_guess
        )
        quote = pricer.quote(request.dci.with_strike(strike))
    except NonConvergenceError as e:
        raise HTTPException(
            status_code=422,
            detail=f"{e} (last strike {e.last_strike}, last value {e.last_value})",
        )
    except PricerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SolveStrikeResponse(strike=strike, quote=quote)


@app.post("/dci/strike-ladder", response_model=List[LadderRung])
async def strike_ladder(request: StrikeLadderRequest):
    """Coupons for evenly spaced strikes."""
    try:
        ladder = dci_strike_ladder(
            request.dci, request.count, request.min_ratio, request.max_ratio
        )
    except PricerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [LadderRung(strike=k, coupon_annual=c) for k, c in ladder]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
