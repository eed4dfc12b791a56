"""
mmoweb project package.

Keep this module free of side effects: manage.py, ASGI and WSGI import it
before settings are configured.
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
