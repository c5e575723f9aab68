"""
Metric Interpretation — Plain-language sentences for fairness metric values.
"""

from __future__ import annotations

from app.core.numbers import format_number, round_half_up

SPD_NAMES = frozenset({"SPD", "Statistical Parity Difference"})
FPR_NAMES = frozenset({"FPR", "False Positive Rate"})
ERROR_RATE_NAMES = frozenset({"Error Rate"})


def interpret_metric(
    metric_name: str,
    value: float,
    group_a: str,
    group_b: str,
    threshold: float = 0.05,
) -> str:
    """
    Turn a metric value into one sentence an auditor can quote.

    Uses |value| as percentage points and |value| / threshold as the
    multiple of the threshold, both rounded half-up. A non-positive
    threshold yields "N/A" for the ratio instead of dividing by zero.
    """
    abs_val = abs(value)
    pct_points = f"{round_half_up(abs_val * 100, 0):.0f}"
    ratio = f"{round_half_up(abs_val / threshold, 1):.1f}" if threshold > 0 else "N/A"
    direction = "more" if value > 0 else "less"

    if metric_name in SPD_NAMES:
        return (
            f"{group_a} is {pct_points} percentage points {direction} likely to receive "
            f"the outcome than {group_b} ({ratio}x the {threshold * 100:.0f}pp regulatory threshold)."
        )
    if metric_name in FPR_NAMES:
        return (
            f"{group_a} faces a {pct_points}% false positive rate vs {group_b}, "
            f"a difference of {pct_points}pp."
        )
    if metric_name in ERROR_RATE_NAMES:
        return (
            f"{pct_points}% of decisions for {group_a} were incorrect — "
            f"{ratio}x the acceptable threshold."
        )
    return f"{metric_name}: {value:.3f} for {group_a} vs {group_b} (threshold: {format_number(threshold)})."
