"""Cron expressions, structured logging, RPC-style errors and flag configuration."""

__version__ = "0.1.0"