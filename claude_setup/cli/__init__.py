"""
claude-setup CLI module.

This module provides the command-line interface for claude-setup.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
