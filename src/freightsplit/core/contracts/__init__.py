"""
Contract Validation Module

JSON Schema контракт снапшота группы freightsplit.
"""

from .snapshot import GROUP_SNAPSHOT_SCHEMA, group_snapshot_validator, validate_group_snapshot

__all__ = [
    "GROUP_SNAPSHOT_SCHEMA",
    "group_snapshot_validator",
    "validate_group_snapshot",
]
