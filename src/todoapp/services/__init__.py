"""Shared services: database access, authentication, errors, logging and rate limiting."""
