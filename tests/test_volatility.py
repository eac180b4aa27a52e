"""Tests for volatility surfaces and the 25-delta smile."""

import pytest

from dci_pricer.core.errors import CurveConstructionError, InputOutOfRangeError
from dci_pricer.market.volatility import (
    FlatVolSurface,
    InterpolatedVolSurface,
    VolSmileParameters,
    VolSurfacePoint,
)


class TestVolSurfacePoint:
    """Tests for VolSurfacePoint."""

    def test_with_forward(self) -> None:
        point = VolSurfacePoint.with_forward(31.0, 0.5, 0.1, forward=31.0)

        assert point.moneyness == pytest.approx(1.0)

    @pytest.mark.parametrize("strike,tenor,vol", [
        (0.0, 0.5, 0.1),
        (30.0, -0.5, 0.1),
        (30.0, 0.5, 0.0),
        (30.0, 0.5, 6.0),
    ])
    def test_invalid_quote(self, strike, tenor, vol) -> None:
        with pytest.raises(InputOutOfRangeError):
            VolSurfacePoint(strike, tenor, vol)


class TestFlatVolSurface:
    """Tests for FlatVolSurface."""

    def test_constant(self) -> None:
        surface = FlatVolSurface(0.15)

        assert surface.volatility(1.0, 0.1) == 0.15
        assert surface.volatility(100.0, 10.0) == 0.15
        assert surface.volatility_by_moneyness(1.2, 1.0) == 0.15
        assert surface.atm_volatility(30.5, 0.25) == 0.15

    def test_in_range_everywhere(self) -> None:
        assert FlatVolSurface(0.15).is_in_range(1e6, 50.0)

    @pytest.mark.parametrize("vol", [0.0, -0.1, 5.1])
    def test_invalid_volatility(self, vol) -> None:
        with pytest.raises(InputOutOfRangeError, match="Volatility"):
            FlatVolSurface(vol)

    def test_invalid_query(self) -> None:
        with pytest.raises(InputOutOfRangeError, match="Strike"):
            FlatVolSurface(0.15).volatility(-1.0, 0.5)


class TestInterpolatedVolSurface:
    """Bilinear interpolation on a strike x tenor grid."""

    def test_exact_at_grid_points(self, grid_surface) -> None:
        assert grid_surface.volatility(29.0, 0.25) == pytest.approx(0.12)
        assert grid_surface.volatility(32.0, 1.0) == pytest.approx(0.09)

    def test_bilinear_center(self, grid_surface) -> None:
        assert grid_surface.volatility(30.5, 0.625) == pytest.approx(0.11)

    def test_linear_along_strike(self, grid_surface) -> None:
        assert grid_surface.volatility(30.0, 0.25) == pytest.approx(0.12 - 0.02 / 3)

    def test_clamped_outside_grid(self, grid_surface) -> None:
        assert grid_surface.volatility(25.0, 0.1) == pytest.approx(0.12)
        assert grid_surface.volatility(40.0, 5.0) == pytest.approx(0.09)

    def test_moneyness_uses_mid_strike(self, grid_surface) -> None:
        assert grid_surface.volatility_by_moneyness(1.0, 0.25) == pytest.approx(0.11)

    def test_valid_range(self, grid_surface) -> None:
        assert grid_surface.valid_range() == (29.0, 32.0, 0.25, 1.0)
        assert grid_surface.is_in_range(30.0, 0.5)
        assert not grid_surface.is_in_range(33.0, 0.5)

    def test_too_few_points(self) -> None:
        with pytest.raises(CurveConstructionError, match="at least 4"):
            InterpolatedVolSurface([VolSurfacePoint(29.0, 0.25, 0.12)])

    def test_single_tenor_rejected(self) -> None:
        points = [VolSurfacePoint(k, 0.25, 0.1) for k in (28.0, 29.0, 30.0, 31.0)]

        with pytest.raises(CurveConstructionError, match="2 tenors"):
            InterpolatedVolSurface(points)

    def test_duplicate_quote_rejected(self) -> None:
        points = [
            VolSurfacePoint(29.0, 0.25, 0.12),
            VolSurfacePoint(29.0, 0.25, 0.11),
            VolSurfacePoint(32.0, 0.25, 0.10),
            VolSurfacePoint(29.0, 1.0, 0.13),
            VolSurfacePoint(32.0, 1.0, 0.09),
        ]

        with pytest.raises(CurveConstructionError, match="Duplicate"):
            InterpolatedVolSurface(points)

    def test_ragged_grid_rejected(self) -> None:
        points = [
            VolSurfacePoint(29.0, 0.25, 0.12),
            VolSurfacePoint(32.0, 0.25, 0.10),
            VolSurfacePoint(29.0, 1.0, 0.13),
            VolSurfacePoint(31.0, 1.0, 0.09),
        ]

        with pytest.raises(CurveConstructionError, match="not rectangular"):
            InterpolatedVolSurface(points)


class TestVolSmileParameters:
    """Tests for the 25-delta smile."""

    @pytest.fixture
    def smile(self) -> VolSmileParameters:
        return VolSmileParameters(atm_vol=0.10, rr_25d=0.02, bf_25d=0.005, tenor=0.25)

    def test_wing_vols(self, smile) -> None:
        assert smile.put_25d_vol == pytest.approx(0.115)
        assert smile.call_25d_vol == pytest.approx(0.095)

    @pytest.mark.parametrize("delta,expected", [
        (0.5, 0.10),
        (-0.5, 0.10),
        (0.25, 0.095),
        (-0.25, 0.115),
        (0.375, 0.0975),
        (-0.375, 0.1075),
        (0.10, 0.095),
        (-0.10, 0.115),
        (0.80, 0.11),
    ])
    def test_vol_by_delta(self, smile, delta, expected) -> None:
        assert smile.vol_by_delta(delta) == pytest.approx(expected)

    def test_delta_out_of_range(self, smile) -> None:
        with pytest.raises(InputOutOfRangeError, match="Delta"):
            smile.vol_by_delta(1.5)

    def test_flat_smile(self) -> None:
        smile = VolSmileParameters.flat(0.12, 1.0)

        assert smile.vol_by_delta(0.1) == pytest.approx(0.12)
        assert smile.vol_by_delta(-0.4) == pytest.approx(0.12)

    @pytest.mark.parametrize("rr,bf", [(0.6, 0.0), (0.0, -0.01), (0.0, 0.6)])
    def test_invalid_parameters(self, rr, bf) -> None:
        with pytest.raises(InputOutOfRangeError):
            VolSmileParameters(atm_vol=0.1, rr_25d=rr, bf_25d=bf, tenor=1.0)
