"""
Entry point for running claude-setup as a module.

Usage: python -m claude_setup [command] [options]
"""

from claude_setup.cli.parser import main

if __name__ == "__main__":
    main()
