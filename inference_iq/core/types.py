"""Type definitions for the inference estimator."""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .exceptions import InvalidConfigError


SUPPORTED_PRECISIONS = (8, 16, 32)


@dataclass(frozen=True)
class HardwareProfile:
    """Accelerator specifications.

    Theoretical figures are vendor peaks and are kept for display only.
    The model reads the effective (sustained) figures exclusively.
    """
    name: str
    memory_capacity_gb: float
    memory_bandwidth_tbps: float
    memory_bandwidth_effective_tbps: float
    compute_throughput_tflops: float
    compute_throughput_effective_tflops: float

    @property
    def bandwidth_efficiency(self) -> float:
        """Fraction of peak memory bandwidth sustained in practice."""
        if self.memory_bandwidth_tbps <= 0:
            return 0.0
        return self.memory_bandwidth_effective_tbps / self.memory_bandwidth_tbps

    @property
    def compute_efficiency(self) -> float:
        """Model FLOPs utilization implied by the effective compute figure."""
        if self.compute_throughput_tflops <= 0:
            return 0.0
        return self.compute_throughput_effective_tflops / self.compute_throughput_tflops

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class ReferencePricing:
    """Unit prices of a hosted API used as the cost baseline."""
    name: str
    prompt_cost_per_1k: float
    completion_cost_per_1k: float


GPT35_TURBO = ReferencePricing(
    name="GPT-3.5 Turbo",
    prompt_cost_per_1k=0.0015,
    completion_cost_per_1k=0.002,
)


@dataclass(frozen=True)
class WorkloadConfig:
    """A single inference workload on a fixed accelerator set."""
    model_params_b: float = 70.0
    sequence_length: int = 2048
    batch_size: int = 1
    num_accelerators: int = 2
    accelerator_type: str = "A100-80GB"
    precision_bits: int = 16
    accelerator_cost_per_hour: float = 2.21  # USD, per accelerator
    prompt_tokens: int = 1000
    completion_tokens: int = 500

    @classmethod
    def field_names(cls):
        return [f.name for f in dataclasses.fields(cls)]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkloadConfig":
        """Build a config from a mapping, e.g. a parsed JSON file.

        Missing keys take the defaults; unknown keys are rejected.
        """
        unknown = set(data) - set(cls.field_names())
        if unknown:
            raise InvalidConfigError(
                f"Unknown workload config field(s): {', '.join(sorted(unknown))}"
            )
        return cls(**data)

    def replace(self, **changes) -> "WorkloadConfig":
        """Return a copy with some fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class InferenceEstimate:
    """Everything derived from one WorkloadConfig."""
    # Memory
    weights_memory_gb: float
    kv_cache_per_token_mb: float
    kv_cache_memory_gb: float
    total_memory_gb: float
    aggregate_memory_gb: float
    memory_utilization_pct: float

    # Timing (seconds)
    prefill_time_s: float
    decode_time_s: float
    total_time_s: float

    # Throughput
    prefill_tokens_per_s: float
    decode_tokens_per_s: float

    # Cost (USD)
    cost_per_second: float
    total_cost: float
    prefill_cost_per_1k: float
    decode_cost_per_1k: float

    # Capacity; None means the KV cache places no bound on batch size
    max_batch_size: Optional[int]
    optimal_batch_size: int

    # Comparison against the reference API
    prefill_savings_pct: float
    decode_savings_pct: float
    reference: ReferencePricing = field(default=GPT35_TURBO)

    @property
    def batch_unbounded(self) -> bool:
        return self.max_batch_size is None

    @property
    def fits_in_memory(self) -> bool:
        return self.memory_utilization_pct <= 100.0

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        if self.max_batch_size is None:
            data["max_batch_size"] = "unbounded"
        return data


@dataclass(frozen=True)
class Advisory:
    """A recommendation derived from comparing an estimate's fields."""
    code: str
    severity: str  # "info" or "warning"
    message: str

    def to_dict(self) -> Dict[str, str]:
        return dataclasses.asdict(self)
