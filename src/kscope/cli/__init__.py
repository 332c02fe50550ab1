"""
kscope Command-Line Interface
=============================

This package provides the command-line tool for kscope:

- **ksrepl**: interactive read loop, or syntax checker for a source file

The tool is a Click-based CLI application with built-in help and
consistent exit codes (see kscope.cli.errors).
"""

__all__ = ["ksrepl"]
