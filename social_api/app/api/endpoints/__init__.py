"""Domain routers: ``auth``, ``users`` and ``posts``."""
