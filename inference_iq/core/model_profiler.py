"""Model size presets and the sizing rules derived from parameter count."""

import math
import re
from typing import Union

from .exceptions import InvalidConfigError


# KV cache per token measured for a 70B model. Other sizes scale linearly
# with parameter count; layer count and head dimensions are not modelled.
KV_CACHE_MB_PER_TOKEN_70B = 0.41
REFERENCE_MODEL_PARAMS_B = 70

# Known model sizes (billions of parameters)
MODEL_PRESETS = {
    "llama-2-7b": 7,
    "llama-2-13b": 13,
    "llama-2-70b": 70,
}


def kv_cache_per_token_mb(model_params_b: float) -> float:
    """KV cache size per token in MB."""
    return KV_CACHE_MB_PER_TOKEN_70B * (model_params_b / REFERENCE_MODEL_PARAMS_B)


def weights_memory_gb(model_params_b: float, precision_bits: int) -> float:
    """Model weights size in GB (8 bits per byte, 1e9 params per billion)."""
    return model_params_b * precision_bits / 8


def flops_per_token(model_params_b: float) -> float:
    """FLOPs per token for a forward pass (2 per parameter)."""
    return 2 * model_params_b * 1e9


def resolve_model_size(model: Union[str, int, float]) -> float:
    """Resolve a model name or size to billions of parameters.

    Accepts a preset name (``llama-2-13b``), a HuggingFace style id
    (``meta-llama/Llama-2-13b-hf``) or a number (``13``, ``"6.7"``).
    """
    if isinstance(model, bool):
        raise InvalidConfigError(f"Unknown model: {model!r}")
    if isinstance(model, (int, float)):
        size = float(model)
    else:
        key = model.strip().lower()
        if key in MODEL_PRESETS:
            return float(MODEL_PRESETS[key])

        try:
            size = float(key)
        except ValueError:
            # Pattern: name-XXb or name-XXB
            match = re.search(r'(\d+(?:\.\d+)?)b(?![a-z])', key.split('/')[-1])
            if not match:
                raise InvalidConfigError(
                    f"Unknown model: {model}. Use one of {', '.join(MODEL_PRESETS)} "
                    f"or a parameter count in billions."
                ) from None
            size = float(match.group(1))

    if not math.isfinite(size) or size <= 0:
        raise InvalidConfigError(f"Model size must be positive, got {model!r}")
    return size
