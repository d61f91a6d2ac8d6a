"""
claude-setup CLI argument parser.

This module implements the command-line interface for claude-setup using argparse.
"""

import argparse
import importlib
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("claude-setup")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """claude-setup command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="claude-setup",
            description="Install the Claude CLI on CI runners, cached across runs",
            epilog='Use "claude-setup COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"claude-setup {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./claude-setup.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_setup_command(subparsers)
        self._add_cache_key_command(subparsers)
        self._add_verify_command(subparsers)

        return parser

    def _add_setup_command(self, subparsers):
        """Add 'setup' subcommand."""
        parser = subparsers.add_parser(
            "setup",
            help="Install Claude Code (restoring from cache when possible)",
            description=(
                "Restore Claude Code from cache or install it, add it to PATH, "
                "and optionally configure plugin marketplaces and plugins"
            ),
        )
        parser.add_argument(
            "--claude-version",
            metavar="VERSION",
            help="Version to install: a version number, 'stable' or 'latest' "
            "(default: latest)",
        )
        parser.add_argument(
            "--target",
            metavar="TARGET",
            help="Target passed to the installer ('claude install TARGET')",
        )
        parser.add_argument(
            "--github-token",
            metavar="TOKEN",
            help="GitHub token for private marketplaces and plugins",
        )
        parser.add_argument(
            "--marketplaces",
            metavar="LIST",
            help="Comma or newline separated marketplace sources",
        )
        parser.add_argument(
            "--plugins",
            metavar="LIST",
            help="Comma or newline separated plugins (name@marketplace)",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="DIR",
            help="Local cache store (default: ~/.cache/claude-setup)",
        )
        parser.add_argument(
            "--no-cache",
            action="store_true",
            help="Skip cache restore and save",
        )

    def _add_cache_key_command(self, subparsers):
        """Add 'cache-key' subcommand."""
        parser = subparsers.add_parser(
            "cache-key",
            help="Print cache keys for a version",
            description="Print the primary cache key and restore keys for a version",
        )
        parser.add_argument(
            "--claude-version",
            metavar="VERSION",
            help="Version token (default: configured version)",
        )

    def _add_verify_command(self, subparsers):
        """Add 'verify' subcommand."""
        subparsers.add_parser(
            "verify",
            help="Verify the Claude Code installation",
            description="Check the installed executable and print its version",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "setup": "claude_setup.cli.commands.setup",
            "cache-key": "claude_setup.cli.commands.cache_key",
            "verify": "claude_setup.cli.commands.verify",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
