"""
pulse/sources/errors.py

Failure types raised while turning a configured source into records.

All of them are contained by the file cache and converted into an empty,
logged result.
"""

from __future__ import annotations


class SourceError(RuntimeError):
    """
    Base class for resolve/fetch/parse failures of one source.
    """


class ResolutionFailure(SourceError):
    """
    Raised (or attached to a resolution) when a share URL carries no file id.
    """


class FetchFailure(SourceError):
    """
    Raised when a source cannot be downloaded or read.
    """


class ParseFailure(SourceError):
    """
    Raised when downloaded text is not usable CSV.
    """
