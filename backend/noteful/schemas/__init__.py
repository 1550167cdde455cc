"""
Pydantic request/response schemas.

Schemas are separate from the SQLAlchemy models: they define exactly what
leaves the service (public `id`, camelCase field names, never the credential
hash) and what the validators hand to the services.
"""
