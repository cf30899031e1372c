"""
M9312 PROM Tools Command-Line Interface
=======================================

This package provides the command-line tool for the M9312 PROM tools:

- **m9312**: convert boot PROM images between PROM programmer hex files,
  DEC absolute binary files and octal dumps

The tool is implemented as a Click-based CLI application with
help text and consistent exit codes.
"""

__all__ = ["m9312"]
