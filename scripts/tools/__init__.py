"""
Program Tools Package

Operator tooling for the program cycle engine.

Core modules:
- program_cli: Command-line interface for logging days, setting the start
  date, importing history and recording fit tests
"""

__version__ = "1.0.0"
