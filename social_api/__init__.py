"""
Top-level package for the Social API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``social_api.app.main:app``.
"""

__all__ = []
