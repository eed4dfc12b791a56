"""
Core application package: ambient plumbing shared by every other app.

Keep this file free of side effects so imports remain predictable
in management commands and tests.
"""

__all__: list[str] = []
