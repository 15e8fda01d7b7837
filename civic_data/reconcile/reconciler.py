"""
Reconciliation of per-source outcomes into one value and a confidence score.

Strategies form a closed set. Unknown method names resolve to DIRECT as an
explicit variant case.
"""

import math
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from ..models import DataPointSpec, FetchOutcome, ReconciliationResult
from ..ingest.field_extractor import try_number


NO_METHOD = "none"


class ReconciliationMethod(str, Enum):
    WEIGHTED_AVERAGE = "weighted-average"
    MAX_CONFIDENCE = "max-confidence"
    DIRECT = "direct"

    @classmethod
    def resolve(cls, name: Optional[str]) -> Tuple["ReconciliationMethod", bool]:
        """
        Map a configured method name to a strategy.

        Returns:
            (method, recognized). Unrecognized names yield (DIRECT, False).
        """
        if not name:
            return cls.WEIGHTED_AVERAGE, True
        if name in METHOD_ALIASES:
            return METHOD_ALIASES[name], True
        try:
            return cls(name), True
        except ValueError:
            return cls.DIRECT, False


METHOD_ALIASES = {
    "average": ReconciliationMethod.WEIGHTED_AVERAGE,
}


def successful_outcomes(outcomes: Sequence[FetchOutcome]) -> List[FetchOutcome]:
    return [o for o in outcomes if o.success and o.value is not None]


def attempted_count(outcomes: Sequence[FetchOutcome]) -> int:
    """Number of outcomes that were dispatched (skipped sources excluded)."""
    return sum(1 for o in outcomes if o.attempted)


def confidence_score(usable_count: int, attempted: int) -> float:
    if attempted == 0:
        return 0.0
    return min(1.0, usable_count / attempted)


def weighted_average(successful: Sequence[FetchOutcome]) -> Tuple[Optional[float], int]:
    """
    Weighted mean over numerically parseable values.

    Returns:
        (value, contributing_count). value is None when no value parses or
        the total weight is zero.
    """
    pairs = []
    for outcome in successful:
        number = try_number(outcome.value)
        if number is not None:
            pairs.append((number, outcome.weight))

    total_weight = sum(w for _, w in pairs)
    if not pairs or total_weight == 0:
        return None, len(pairs)
    mean = sum(v * w for v, w in pairs) / total_weight
    if not math.isfinite(mean):
        # Finite inputs near the float limit can still overflow
        return None, 0
    return mean, len(pairs)


def max_confidence(successful: Sequence[FetchOutcome]) -> Any:
    # max() keeps the first of equal weights, i.e. configuration order
    return max(successful, key=lambda o: o.weight).value


def direct(successful: Sequence[FetchOutcome]) -> Any:
    return successful[0].value


def reconcile(spec: DataPointSpec, outcomes: Sequence[FetchOutcome]) -> ReconciliationResult:
    """
    Combine one data point's outcomes into a reconciled value.

    Args:
        spec: Data point configuration (selects the strategy)
        outcomes: One FetchOutcome per configured source

    Returns:
        ReconciliationResult(value, confidence, method). When nothing usable
        survives, value is None, confidence 0 and method "none".
    """
    successful = successful_outcomes(outcomes)
    if not successful:
        return ReconciliationResult(value=None, confidence=0.0, method=NO_METHOD)

    method, _recognized = ReconciliationMethod.resolve(spec.reconciliation_method)
    attempted = attempted_count(outcomes)

    if method is ReconciliationMethod.WEIGHTED_AVERAGE:
        value, usable = weighted_average(successful)
        if value is None:
            return ReconciliationResult(value=None, confidence=0.0, method=NO_METHOD)
    elif method is ReconciliationMethod.MAX_CONFIDENCE:
        value, usable = max_confidence(successful), len(successful)
    else:
        value, usable = direct(successful), len(successful)

    # Report the configured name, so an unknown method stays visible in the audit trail
    return ReconciliationResult(
        value=value,
        confidence=confidence_score(usable, attempted),
        method=spec.reconciliation_method or method.value,
    )
