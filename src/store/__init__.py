"""Index and resolution layer.

This package persists view and metadata records and resolves semantic
names back to concrete pond or derived files.
"""
