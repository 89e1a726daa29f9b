"""Bounded contexts of texwrap."""
