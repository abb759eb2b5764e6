"""Concrete implementations of the interfaces in :mod:`vivino_rating.interfaces`."""
