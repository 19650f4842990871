class PageParseError(Exception):
    """The page has a structural defect; no database can be built from it."""


class RichTextError(Exception):
    """A single description node could not be classified."""


class PageSourceError(Exception):
    """A page revision could not be fetched or read from the cache."""
