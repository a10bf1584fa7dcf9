# marketing_scout/__init__.py
"""
MarketingScout package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from marketing_scout.cli import cli as main_cli  # noqa: E402
