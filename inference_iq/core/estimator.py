"""Analytical memory, latency and cost model for LLM inference.

Prefill is treated as compute-bound and decode as memory-bandwidth-bound,
both against the sustained (effective) figures of the hardware profile.
"""

import logging
import math
from typing import Dict, Optional

from .exceptions import InvalidConfigError
from .hardware_catalog import DEFAULT_CATALOG, HardwareCatalog
from .model_profiler import flops_per_token, kv_cache_per_token_mb, weights_memory_gb
from .types import (
    GPT35_TURBO,
    SUPPORTED_PRECISIONS,
    HardwareProfile,
    InferenceEstimate,
    ReferencePricing,
    WorkloadConfig,
)

logger = logging.getLogger(__name__)


# Practical latency ceiling on batch size, independent of memory headroom
MAX_PRACTICAL_BATCH_SIZE = 64

SECONDS_PER_HOUR = 3600


def _check_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidConfigError(f"{name} must be positive, got {value}")
    _check_float_range(name, value)


def _check_float_range(name: str, value) -> None:
    try:
        float(value)
    except OverflowError:
        raise InvalidConfigError(f"{name} is too large to estimate with") from None


def _check_real(name: str, value, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigError(f"{name} must be a number, got {value!r}")
    _check_float_range(name, value)
    if not math.isfinite(value):
        raise InvalidConfigError(f"{name} must be finite, got {value}")
    if value < 0 or (value == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "positive"
        raise InvalidConfigError(f"{name} must be {qualifier}, got {value}")


def validate_config(config: WorkloadConfig) -> None:
    """Check every field of a config against its constraint.

    Raises:
        InvalidConfigError: on the first invalid field.
    """
    _check_real("model_params_b", config.model_params_b)
    _check_positive_int("sequence_length", config.sequence_length)
    _check_positive_int("batch_size", config.batch_size)
    _check_positive_int("num_accelerators", config.num_accelerators)
    if config.precision_bits not in SUPPORTED_PRECISIONS or isinstance(config.precision_bits, bool):
        raise InvalidConfigError(
            f"precision_bits must be one of {SUPPORTED_PRECISIONS}, got {config.precision_bits!r}"
        )
    _check_real("accelerator_cost_per_hour", config.accelerator_cost_per_hour, allow_zero=True)
    _check_positive_int("prompt_tokens", config.prompt_tokens)
    _check_positive_int("completion_tokens", config.completion_tokens)


def _check_derived(name: str, value: float) -> None:
    """Reject a derived quantity that cannot be used as a denominator."""
    if not (value > 0 and math.isfinite(value)):
        raise InvalidConfigError(
            f"Derived {name} is {value}; inputs are outside the range the model can represent"
        )


def savings_percent(reference_price: float, own_price: float) -> float:
    """Percentage saved versus the reference; negative when more expensive."""
    if reference_price <= 0:
        raise InvalidConfigError(f"Reference price must be positive, got {reference_price}")
    return (reference_price - own_price) / reference_price * 100


class InferenceEstimator:
    """Estimates memory, latency, throughput and cost for a workload."""

    def __init__(
        self,
        hardware_catalog: HardwareCatalog = DEFAULT_CATALOG,
        reference: ReferencePricing = GPT35_TURBO,
    ):
        self.hardware = hardware_catalog
        self.reference = reference

    def analyze_memory(self, config: WorkloadConfig, gpu: HardwareProfile) -> Dict[str, float]:
        """Size weights and KV cache against the aggregate device memory.

        Utilization is reported unclamped; above 100 means the
        configuration does not fit.
        """
        weights_gb = weights_memory_gb(config.model_params_b, config.precision_bits)
        kv_per_token_mb = kv_cache_per_token_mb(config.model_params_b)
        kv_cache_gb = kv_per_token_mb * config.sequence_length * config.batch_size / 1024

        total_gb = weights_gb + kv_cache_gb
        aggregate_gb = gpu.memory_capacity_gb * config.num_accelerators

        return {
            "weights_memory_gb": weights_gb,
            "kv_cache_per_token_mb": kv_per_token_mb,
            "kv_cache_memory_gb": kv_cache_gb,
            "total_memory_gb": total_gb,
            "aggregate_memory_gb": aggregate_gb,
            "memory_utilization_pct": total_gb / aggregate_gb * 100,
        }

    def analyze_prefill(self, config: WorkloadConfig, gpu: HardwareProfile) -> Dict[str, float]:
        """Analyze prefill phase (prompt processing).

        All prompt tokens are processed in parallel, so the phase is bound
        by compute and does not depend on batch size or sequence length.
        """
        total_compute = gpu.compute_throughput_effective_tflops * config.num_accelerators * 1e12
        prefill_flops = flops_per_token(config.model_params_b) * config.prompt_tokens

        prefill_time_s = prefill_flops / total_compute
        _check_derived("prefill_time_s", prefill_time_s)
        prefill_tokens_per_s = config.prompt_tokens / prefill_time_s
        _check_derived("prefill_tokens_per_s", prefill_tokens_per_s)
        return {
            "prefill_time_s": prefill_time_s,
            "prefill_tokens_per_s": prefill_tokens_per_s,
        }

    def analyze_decode(
        self,
        config: WorkloadConfig,
        gpu: HardwareProfile,
        weights_gb: float,
        kv_per_token_mb: float,
    ) -> Dict[str, float]:
        """Analyze decode phase (token generation).

        Each step streams the full weight set plus one token of KV cache per
        sequence from device memory, and yields one token per sequence.
        """
        total_memory_bw = gpu.memory_bandwidth_effective_tbps * config.num_accelerators * 1e12

        # bytes moved per decode step
        memory_per_step = weights_gb * 1e9 + kv_per_token_mb * config.batch_size * 1e6
        _check_derived("memory_per_step", memory_per_step)

        decode_tokens_per_s = total_memory_bw / memory_per_step * config.batch_size
        _check_derived("decode_tokens_per_s", decode_tokens_per_s)
        decode_time_s = config.completion_tokens / decode_tokens_per_s
        _check_derived("decode_time_s", decode_time_s)
        return {
            "decode_tokens_per_s": decode_tokens_per_s,
            "decode_time_s": decode_time_s,
        }

    def analyze_cost(
        self,
        config: WorkloadConfig,
        prefill_time_s: float,
        decode_time_s: float,
    ) -> Dict[str, float]:
        """Price the request at the rental rate of the whole accelerator set."""
        cost_per_second = config.accelerator_cost_per_hour * config.num_accelerators / SECONDS_PER_HOUR
        total_time_s = prefill_time_s + decode_time_s

        return {
            "total_time_s": total_time_s,
            "cost_per_second": cost_per_second,
            "total_cost": cost_per_second * total_time_s,
            "prefill_cost_per_1k": cost_per_second * prefill_time_s * 1000 / config.prompt_tokens,
            "decode_cost_per_1k": cost_per_second * decode_time_s * 1000 / config.completion_tokens,
        }

    def find_max_batch_size(
        self,
        config: WorkloadConfig,
        aggregate_gb: float,
        weights_gb: float,
        kv_cache_gb: float,
    ) -> Optional[int]:
        """Find how many sequences' KV cache fit beside the weights.

        Returns:
            Maximum batch size, negative if the weights alone do not fit, or
            None if a single sequence needs no KV cache (unbounded).
        """
        kv_per_sequence_gb = kv_cache_gb / config.batch_size
        if kv_per_sequence_gb <= 0:
            return None

        max_batch = (aggregate_gb - weights_gb) / kv_per_sequence_gb
        if not math.isfinite(max_batch):
            return None
        return math.floor(max_batch)

    def estimate(self, config: WorkloadConfig) -> InferenceEstimate:
        """Estimate a full request including prefill and decode.

        Raises:
            InvalidConfigError: if any field violates its constraint.
            UnknownAcceleratorError: if the accelerator type is not in the
                catalog.
        """
        validate_config(config)
        gpu = self.hardware.lookup(config.accelerator_type)

        memory = self.analyze_memory(config, gpu)
        prefill = self.analyze_prefill(config, gpu)
        decode = self.analyze_decode(
            config, gpu, memory["weights_memory_gb"], memory["kv_cache_per_token_mb"]
        )
        cost = self.analyze_cost(config, prefill["prefill_time_s"], decode["decode_time_s"])

        max_batch = self.find_max_batch_size(
            config,
            memory["aggregate_memory_gb"],
            memory["weights_memory_gb"],
            memory["kv_cache_memory_gb"],
        )
        if max_batch is None:
            optimal_batch = MAX_PRACTICAL_BATCH_SIZE
        else:
            optimal_batch = min(max_batch, MAX_PRACTICAL_BATCH_SIZE)

        result = InferenceEstimate(
            max_batch_size=max_batch,
            optimal_batch_size=optimal_batch,
            prefill_savings_pct=savings_percent(
                self.reference.prompt_cost_per_1k, cost["prefill_cost_per_1k"]
            ),
            decode_savings_pct=savings_percent(
                self.reference.completion_cost_per_1k, cost["decode_cost_per_1k"]
            ),
            reference=self.reference,
            **memory,
            **prefill,
            **decode,
            **cost,
        )

        logger.debug(
            "%s x%d, %.1fB @ %d-bit: mem %.1f%%, prefill %.0f tok/s, decode %.1f tok/s, $%.6f",
            config.accelerator_type,
            config.num_accelerators,
            config.model_params_b,
            config.precision_bits,
            result.memory_utilization_pct,
            result.prefill_tokens_per_s,
            result.decode_tokens_per_s,
            result.total_cost,
        )
        return result


def estimate(
    config: WorkloadConfig,
    hardware_catalog: HardwareCatalog = DEFAULT_CATALOG,
    reference: ReferencePricing = GPT35_TURBO,
) -> InferenceEstimate:
    """Estimate a workload against a catalog and reference pricing."""
    return InferenceEstimator(hardware_catalog, reference).estimate(config)
