"""
Single file store service.

This package provides a FastAPI application that keeps one text blob in a
single-row table and exposes it over a small CRUD API.
"""
