"""Fetchers package for enumerating Paper documents in a Dropbox account."""

from .paper_fetcher import EnumerationError, FetcherError, PaperFetcher

__all__ = [
    'EnumerationError',
    'FetcherError',
    'PaperFetcher'
]
