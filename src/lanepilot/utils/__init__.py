"""Utilities."""

from .terminal import TerminalDisplay, format_decision_stats

__all__ = ['TerminalDisplay', 'format_decision_stats']
