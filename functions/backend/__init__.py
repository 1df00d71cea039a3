"""
Backend package for the portfolio site.

This package provides a FastAPI application exposing a health check,
contact intake backed by an append-only log, and page-view analytics.
"""
