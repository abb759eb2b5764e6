"""Resolve free-text wine names to Vivino ratings.

See :func:`vivino_rating.main.build_resolver` for the composition root and
:class:`vivino_rating.services.rating_resolver.RatingResolver` for the
public ``resolve`` operation.
"""
