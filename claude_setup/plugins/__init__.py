"""
Plugin marketplace and plugin setup for the installed Claude CLI.
"""

from .marketplace import MarketplaceInfo, PluginManager, parse_list, set_github_token
from .validation import (
    MAX_INPUT_LENGTH,
    RejectionReason,
    validate_marketplace_source,
    validate_plugin_name,
)

__all__ = [
    "MarketplaceInfo",
    "PluginManager",
    "parse_list",
    "set_github_token",
    "MAX_INPUT_LENGTH",
    "RejectionReason",
    "validate_marketplace_source",
    "validate_plugin_name",
]
