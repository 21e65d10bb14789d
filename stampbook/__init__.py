"""
Backend package for the stamp rewards tracker.

This package provides a FastAPI application over a single prize collection
persisted through interchangeable key-value backends (local file, Redis or a
hosted KV store).
"""
