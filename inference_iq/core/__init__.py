"""Core modules for the inference estimator."""

from .exceptions import InferenceIQError, InvalidConfigError, UnknownAcceleratorError
from .types import (
    SUPPORTED_PRECISIONS,
    GPT35_TURBO,
    HardwareProfile,
    ReferencePricing,
    WorkloadConfig,
    InferenceEstimate,
    Advisory,
)

from .hardware_catalog import HardwareCatalog, DEFAULT_CATALOG, lookup
from .model_profiler import (
    MODEL_PRESETS,
    kv_cache_per_token_mb,
    weights_memory_gb,
    flops_per_token,
    resolve_model_size,
)
from .estimator import (
    MAX_PRACTICAL_BATCH_SIZE,
    InferenceEstimator,
    estimate,
    validate_config,
)
from .recommendations import advisories

__all__ = [
    "InferenceIQError",
    "InvalidConfigError",
    "UnknownAcceleratorError",
    "SUPPORTED_PRECISIONS",
    "GPT35_TURBO",
    "HardwareProfile",
    "ReferencePricing",
    "WorkloadConfig",
    "InferenceEstimate",
    "Advisory",
    "HardwareCatalog",
    "DEFAULT_CATALOG",
    "lookup",
    "MODEL_PRESETS",
    "kv_cache_per_token_mb",
    "weights_memory_gb",
    "flops_per_token",
    "resolve_model_size",
    "MAX_PRACTICAL_BATCH_SIZE",
    "InferenceEstimator",
    "estimate",
    "validate_config",
    "advisories",
]
