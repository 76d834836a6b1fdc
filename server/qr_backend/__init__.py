"""
Backend package for the QR flyer campaign service.

This package provides a FastAPI application that generates tracked flyer
PDFs, records scans behind the redirect URLs and serves campaign analytics,
with storage and database abstractions that have in-memory doubles for tests.
"""
