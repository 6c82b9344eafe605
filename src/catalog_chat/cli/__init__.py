"""
CLI Module - Command-line interface for catalog-chat.
=====================================================

Usage:
    catalog-chat                      # interactive mode
    catalog-chat ask "Where does Bioinformatics meet?"
    catalog-chat index --rebuild
"""

from catalog_chat.cli.main import app, cli, run_interactive

__all__ = ["app", "cli", "run_interactive"]
