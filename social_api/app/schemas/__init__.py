"""
Pydantic schema definitions for documents and API payloads.

``user`` and ``post`` each define the stored document model and the
typed request models whose fields are the only ones an operation may
write.
"""
