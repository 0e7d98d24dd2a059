"""Persistence collaborators — typed lookups over the store."""
