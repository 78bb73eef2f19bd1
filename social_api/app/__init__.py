"""
Application package.

The API is split into ``stores`` (persistence), ``services`` (business
rules), ``schemas`` (pydantic models) and ``api`` (FastAPI routers),
with shared infrastructure in ``core``.
"""
