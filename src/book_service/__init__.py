"""Book record CRUD service.

A FastAPI application exposing create, read, update, delete and list
operations on a single ``book`` table through a uniform ``{msg, data}``
JSON envelope.
"""

__version__ = "0.1.0"
