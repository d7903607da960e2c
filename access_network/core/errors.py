"""
Errors Module

Exception and warning types raised by the access network core.
"""

from typing import Optional


class AccessNetworkError(Exception):
    """Base class for all access network errors"""


class InvalidConfigurationError(AccessNetworkError, ValueError):
    """Raised for negative or nonsensical configuration values"""


class AddressSpaceExhaustedError(AccessNetworkError):
    """
    Raised when an address tier runs out of blocks

    Attributes:
        tier: Tier whose address space is exhausted
        index: Offending site index (None for the core tier)
    """

    def __init__(self, tier, index: Optional[int], message: str = ""):
        self.tier = tier
        self.index = index
        tier_name = getattr(tier, "value", tier)
        if not message:
            message = f"Address space exhausted for tier '{tier_name}' at index {index}"
        super().__init__(message)


class EmptyFlowDataWarning(UserWarning):
    """Issued when flow statistics are aggregated over an empty flow set"""
