"""Exceptions raised by the inference estimator."""

from typing import Iterable


class InferenceIQError(Exception):
    """Base class for all estimator errors."""


class InvalidConfigError(InferenceIQError, ValueError):
    """A workload configuration or catalog entry is structurally invalid."""


class UnknownAcceleratorError(InferenceIQError, KeyError):
    """The requested accelerator type is not in the hardware catalog."""

    def __init__(self, accelerator_type: str, known: Iterable[str] = ()):
        self.accelerator_type = accelerator_type
        self.known = sorted(known)
        super().__init__(accelerator_type)

    def __str__(self) -> str:
        msg = f"Unknown accelerator type: {self.accelerator_type!r}"
        if self.known:
            msg += f" (known: {', '.join(self.known)})"
        return msg
