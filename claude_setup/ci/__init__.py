"""
CI runner integration (step outputs, PATH, git credentials).
"""

from .actions import add_to_path, set_output, setup_git_credentials

__all__ = ["add_to_path", "set_output", "setup_git_credentials"]
