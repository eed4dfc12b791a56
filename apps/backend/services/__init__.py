"""
Per-collection wrappers around :class:`apps.backend.client.BackendClient`.

Every function takes the client as its first argument and either returns
plain Python data or raises :class:`apps.backend.client.BackendError`.
"""
