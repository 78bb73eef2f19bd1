"""
HTTP boundary.

``router`` exposes every endpoint; ``main.create_app`` mounts it under
``/api``.
"""
