"""
OpenBibles - Command Line Interface

Main CLI entry point for parsing and importing original-language verses.
"""
from cli.main import app, main

__all__ = ["app", "main"]
