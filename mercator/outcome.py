"""Tagged success/failure values for best-effort resolution loops."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .errors import MercatorError


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    error: Optional[MercatorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(func: Callable[..., Any], *args: Any) -> Outcome:
    """Run one remote resolution step, capturing taxonomy errors as a failed Outcome.

    Anything outside the MercatorError hierarchy is a bug and propagates.
    """
    try:
        return Outcome(value=func(*args))
    except MercatorError as err:
        return Outcome(error=err)


def first_success(strategies: Iterable[Callable[[], Any]]) -> Outcome:
    """Try each strategy in order and stop at the first success.

    When every strategy fails, the outcome carries the primary strategy's error.
    """
    primary: Optional[Outcome] = None
    for strategy in strategies:
        outcome = attempt(strategy)
        if outcome.ok:
            return outcome
        if primary is None:
            primary = outcome
    if primary is None:
        raise ValueError("first_success needs at least one strategy")
    return primary
