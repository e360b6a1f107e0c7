"""Data pond ingestion.

This package moves incoming files and archives into the immutable pond
and describes their contents for the index layer.
"""
