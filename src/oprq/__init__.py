"""oprq: OpenAPI to React Query code generator."""

__version__ = "0.1.0"
