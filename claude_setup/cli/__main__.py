"""
Entry point for running the claude-setup CLI as a module.

Usage: python -m claude_setup.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
