"""
InferenceIQ: Inference Cost Estimator for LLM Workloads

A tool to estimate memory footprint, latency, throughput and cost of serving
an LLM on a fixed set of accelerators, compared against a hosted API price.
"""

__version__ = "1.0.0"

from .core import (
    InvalidConfigError,
    UnknownAcceleratorError,
    WorkloadConfig,
    HardwareProfile,
    InferenceEstimate,
    ReferencePricing,
    HardwareCatalog,
    InferenceEstimator,
    estimate,
    advisories,
)

__all__ = [
    "InvalidConfigError",
    "UnknownAcceleratorError",
    "WorkloadConfig",
    "HardwareProfile",
    "InferenceEstimate",
    "ReferencePricing",
    "HardwareCatalog",
    "InferenceEstimator",
    "estimate",
    "advisories",
]
