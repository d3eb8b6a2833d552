"""Onramp widget configuration and yield deposit/withdrawal orchestration."""

__version__ = "0.1.0"
