"""
claude-setup: install the Claude CLI on CI runners, cached across runs.
"""

__version__ = "0.1.0"
