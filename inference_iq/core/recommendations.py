"""Recommendations derived from an estimate."""

from typing import List

from .types import Advisory, InferenceEstimate, WorkloadConfig


HIGH_MEMORY_UTILIZATION_PCT = 90.0


def advisories(config: WorkloadConfig, estimate: InferenceEstimate) -> List[Advisory]:
    """Compare estimate fields against fixed thresholds.

    Pure comparisons over the estimate; nothing here feeds back into the
    model.
    """
    notes = []

    if estimate.prefill_savings_pct > 0:
        notes.append(Advisory(
            code="prefill_cheaper",
            severity="info",
            message="Great for prompt-heavy tasks (classification, reranking)",
        ))

    if estimate.decode_savings_pct < 0:
        notes.append(Advisory(
            code="decode_more_expensive",
            severity="warning",
            message=f"More expensive than {estimate.reference.name} for completions",
        ))

    if estimate.memory_utilization_pct > HIGH_MEMORY_UTILIZATION_PCT:
        notes.append(Advisory(
            code="high_memory_utilization",
            severity="warning",
            message="High memory usage - consider more accelerators",
        ))

    if config.batch_size < estimate.optimal_batch_size:
        notes.append(Advisory(
            code="batch_below_optimal",
            severity="info",
            message=f"Increase batch size to {estimate.optimal_batch_size} for better efficiency",
        ))

    return notes
