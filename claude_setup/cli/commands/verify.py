"""
Verify command implementation.

Checks that the Claude CLI is installed and reports its version.
"""

import logging

from claude_setup.core import verify_installation

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    installed = verify_installation()

    print(f"version: {installed.version}")
    print(f"path: {installed.path}")

    return 0
