"""Parameter objects for the forecasting models.

A coefficient field left as ``None`` means "estimate from data". A supplied
coefficient array is pinned: it is used verbatim, even when its length does
not match the order, and the mismatch only surfaces when forecasting.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Sequence

from .errors import InvalidOrderError

Coefficients = Optional[Sequence[float]]


def _check_order(name: str, value: int) -> None:
    if value < 0:
        raise InvalidOrderError(f"{name} must be >= 0, got {value}")


def check_changes(params: Any, changes: Dict[str, Any]) -> None:
    """Reject ``update_params`` keywords that are not fields of ``params``."""
    known = {f.name for f in fields(params)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ValueError(
            f"Unknown parameter(s) for {type(params).__name__}: {', '.join(unknown)}"
        )


@dataclass
class ARParams:
    """Parameters of an AR(p) model.

    Attributes:
        p: AR order.
        coefficients: Pinned AR coefficients [φ_1, ..., φ_p], or None to
            estimate them with Yule-Walker.
    """

    p: int = 1
    coefficients: Coefficients = None

    def __post_init__(self) -> None:
        _check_order("p", self.p)


@dataclass
class MAParams:
    """Parameters of an MA(q) model.

    Attributes:
        q: MA order.
        coefficients: Pinned MA coefficients [θ_1, ..., θ_q], or None.
        errors: Initial residual history, oldest first.
    """

    q: int = 1
    coefficients: Coefficients = None
    errors: Coefficients = None

    def __post_init__(self) -> None:
        _check_order("q", self.q)


@dataclass
class ARMAParams:
    """Parameters of an ARMA(p, q) model.

    Attributes:
        p: AR order.
        q: MA order.
        ar_coefficients: Pinned AR coefficients, or None.
        ma_coefficients: Pinned MA coefficients, or None.
        coefficients: Combined [φ_1..φ_p, θ_1..θ_q]. Used for whichever side
            is not pinned separately, provided it holds at least p + q values.
        errors: Initial residual history, oldest first.
    """

    p: int = 0
    q: int = 0
    ar_coefficients: Coefficients = None
    ma_coefficients: Coefficients = None
    coefficients: Coefficients = None
    errors: Coefficients = None

    def __post_init__(self) -> None:
        _check_order("p", self.p)
        _check_order("q", self.q)


@dataclass
class ARIMAParams:
    """Parameters of an ARIMA(p, d, q) model.

    ``p``, ``q``, the coefficient arrays and ``errors`` describe the ARMA
    model fitted to the d-times differenced series.
    """

    p: int = 0
    d: int = 0
    q: int = 0
    ar_coefficients: Coefficients = None
    ma_coefficients: Coefficients = None
    errors: Coefficients = None

    def __post_init__(self) -> None:
        _check_order("p", self.p)
        _check_order("d", self.d)
        _check_order("q", self.q)

    def arma_params(self) -> ARMAParams:
        """The parameters handed to the inner ARMA model."""
        return ARMAParams(
            p=self.p,
            q=self.q,
            ar_coefficients=self.ar_coefficients,
            ma_coefficients=self.ma_coefficients,
            errors=self.errors,
        )


@dataclass
class LaggedGradientParams:
    """Parameters of the lagged-gradient forecaster.

    Attributes:
        lookback_period: Number of points before the last one used to measure
            the slope.
        smoothing_factor: Exponential smoothing weight in [0, 1] given to the
            more recent gradient estimates.
    """

    lookback_period: int = 10
    smoothing_factor: float = 0.3

    def __post_init__(self) -> None:
        if self.lookback_period < 0:
            raise ValueError(
                f"lookback_period must be >= 0, got {self.lookback_period}"
            )
        if not 0.0 <= self.smoothing_factor <= 1.0:
            raise ValueError(
                f"smoothing_factor must be in [0, 1], got {self.smoothing_factor}"
            )
