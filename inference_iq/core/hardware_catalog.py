"""Hardware catalog of accelerator profiles."""

import json
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .exceptions import InvalidConfigError, UnknownAcceleratorError
from .types import HardwareProfile

logger = logging.getLogger(__name__)


# Effective figures are sustained rates, derated from the vendor peaks:
#   A100: ~65% of peak bandwidth, ~64% MFU
#   H100: ~66% of peak bandwidth, ~64% MFU
BUILTIN_PROFILES = (
    HardwareProfile(
        name="A100-80GB",
        memory_capacity_gb=80,
        memory_bandwidth_tbps=2.0,
        memory_bandwidth_effective_tbps=1.3,
        compute_throughput_tflops=312,
        compute_throughput_effective_tflops=200,
    ),
    HardwareProfile(
        name="H100-80GB",
        memory_capacity_gb=80,
        memory_bandwidth_tbps=3.35,
        memory_bandwidth_effective_tbps=2.2,
        compute_throughput_tflops=989,
        compute_throughput_effective_tflops=630,
    ),
)

_PROFILE_FIELDS = (
    "memory_capacity_gb",
    "memory_bandwidth_tbps",
    "memory_bandwidth_effective_tbps",
    "compute_throughput_tflops",
    "compute_throughput_effective_tflops",
)


def _profile_from_dict(data: Mapping[str, Any]) -> HardwareProfile:
    """Parse one catalog entry, checking every figure is a positive number."""
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Catalog entry must be an object, got {data!r}")
    name = data.get("name")
    if not name or not isinstance(name, str):
        raise InvalidConfigError(f"Catalog entry has no name: {data!r}")

    values = {}
    for key in _PROFILE_FIELDS:
        if key not in data:
            raise InvalidConfigError(f"Catalog entry {name!r} is missing '{key}'")
        value = data[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise InvalidConfigError(
                f"Catalog entry {name!r}: '{key}' must be a positive number, got {value!r}"
            )
        values[key] = value

    return HardwareProfile(name=name, **values)


class HardwareCatalog:
    """Immutable lookup of accelerator profiles by type name."""

    def __init__(
        self,
        catalog_path: Optional[str] = None,
        profiles: Optional[Iterable[HardwareProfile]] = None,
    ):
        """Initialize hardware catalog.

        Args:
            catalog_path: Path to a catalog JSON file. If None, uses the
                built-in profiles (or ``profiles`` when given).
            profiles: Explicit profiles, mostly useful in tests.
        """
        self.catalog_path = catalog_path
        if catalog_path is not None:
            profiles = self._load_catalog(catalog_path)
        elif profiles is None:
            profiles = BUILTIN_PROFILES

        table: Dict[str, HardwareProfile] = {}
        for profile in profiles:
            if profile.name in table:
                raise InvalidConfigError(f"Duplicate accelerator type: {profile.name!r}")
            table[profile.name] = profile
        self._profiles = MappingProxyType(table)

    @staticmethod
    def _load_catalog(catalog_path: str) -> List[HardwareProfile]:
        """Load accelerator profiles from a catalog file."""
        try:
            with open(catalog_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidConfigError(f"Catalog {catalog_path} is not valid JSON: {e}") from e

        entries = data.get('accelerators') if isinstance(data, dict) else None
        if not isinstance(entries, list) or not entries:
            raise InvalidConfigError(
                f"Catalog {catalog_path} must contain a non-empty 'accelerators' list"
            )

        profiles = [_profile_from_dict(entry) for entry in entries]
        logger.debug("Loaded %d accelerator profiles from %s", len(profiles), catalog_path)
        return profiles

    @property
    def profiles(self) -> Mapping[str, HardwareProfile]:
        return self._profiles

    def lookup(self, accelerator_type: str) -> HardwareProfile:
        """Get the profile for an accelerator type.

        Raises:
            UnknownAcceleratorError: if the type is not in the catalog.
        """
        try:
            return self._profiles[accelerator_type]
        except (KeyError, TypeError):
            raise UnknownAcceleratorError(accelerator_type, self._profiles) from None

    def names(self) -> List[str]:
        """Get accelerator type names in catalog order."""
        return list(self._profiles)

    def get_all_profiles(self) -> List[HardwareProfile]:
        """Get all profiles in the catalog."""
        return list(self._profiles.values())

    def __contains__(self, accelerator_type: object) -> bool:
        return accelerator_type in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)


DEFAULT_CATALOG = HardwareCatalog()


def lookup(accelerator_type: str) -> HardwareProfile:
    """Look up a profile in the built-in catalog."""
    return DEFAULT_CATALOG.lookup(accelerator_type)
