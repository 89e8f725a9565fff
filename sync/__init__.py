"""Entity synchronization engine."""

from .errors import SyncError, ValidationFault, NotFoundFault, ConflictFault, TransportFault
from .validation import (
    RuleCode, ValidationRule, NotNullOrWhiteSpaceRule, MaxLengthRule,
    NumericRangeRule, PositionRule, IdRule
)
from .properties import Property, PropertyRegistry
from .context import SyncState, SynchronizationContext, DependentContext
from .field import Field
from .identity_cache import IdentityCache

__all__ = [
    "SyncError", "ValidationFault", "NotFoundFault", "ConflictFault", "TransportFault",
    "RuleCode", "ValidationRule", "NotNullOrWhiteSpaceRule", "MaxLengthRule",
    "NumericRangeRule", "PositionRule", "IdRule",
    "Property", "PropertyRegistry",
    "SyncState", "SynchronizationContext", "DependentContext",
    "Field", "IdentityCache",
]
