"""Platform capability gating for version-dependent store features."""

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Store features that only exist above certain platform versions."""

    PROMOTIONAL_OFFERS = "promotional_offers"
    WIN_BACK_OFFERS = "win_back_offers"


class Platform(str, Enum):
    """Platforms hosting the store API."""

    IOS = "ios"
    MACOS = "macos"


# Minimum platform version per capability
MINIMUM_VERSIONS: dict[Capability, dict[Platform, tuple[int, int]]] = {
    Capability.PROMOTIONAL_OFFERS: {
        Platform.IOS: (17, 4),
        Platform.MACOS: (14, 4),
    },
    Capability.WIN_BACK_OFFERS: {
        Platform.IOS: (18, 0),
        Platform.MACOS: (15, 0),
    },
}


def parse_version(version: str) -> tuple[int, int]:
    """Parse a "major[.minor[.patch]]" version string into (major, minor).

    Args:
        version: Version string, e.g. "17.4" or "18".

    Returns:
        (major, minor) tuple.

    Raises:
        ValueError: If the version is not numeric.
    """
    parts = version.strip().split(".")
    major = int(parts[0])
    minor = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return major, minor


class CapabilityProvider(Protocol):
    """Answers whether the running platform supports a capability."""

    def supports(self, capability: Capability) -> bool: ...


class PlatformCapabilities:
    """Capabilities derived from the platform and its version."""

    def __init__(self, platform: Platform | str, version: str) -> None:
        """Initialize from a platform and version.

        Args:
            platform: Platform name.
            version: Platform version string.
        """
        self._platform = Platform(platform)
        self._version = parse_version(version)

    def supports(self, capability: Capability) -> bool:
        minimum = MINIMUM_VERSIONS.get(capability, {}).get(self._platform)
        if minimum is None:
            return False
        return self._version >= minimum

    def __repr__(self) -> str:
        major, minor = self._version
        return f"PlatformCapabilities({self._platform.value} {major}.{minor})"


class StaticCapabilities:
    """Explicit set of supported capabilities."""

    def __init__(self, supported: set[Capability] | None = None) -> None:
        self._supported = frozenset(supported or ())

    @classmethod
    def all(cls) -> "StaticCapabilities":
        """Support every capability."""
        return cls(set(Capability))

    def supports(self, capability: Capability) -> bool:
        return capability in self._supported
