from __future__ import annotations


class BookmarkError(Exception):
    """Base class for bookmark engine failures."""


class ParseError(BookmarkError):
    """The backing document could not be turned into a tree, even in recover mode."""


class NotFound(BookmarkError):
    """A path did not resolve to an element of the opened document."""


class InvalidParameter(BookmarkError):
    """Arguments rejected before any I/O (wrong node kind, missing values)."""


class StoreIOError(BookmarkError):
    """Opening, reading, writing or flushing a bookmark file failed."""
