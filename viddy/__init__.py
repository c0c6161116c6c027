"""Styled terminal text, output diffs, repeated command execution, history stores and configuration."""

__version__ = "1.0.0"