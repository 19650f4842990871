"""What-the-port package.

This package answers "what is this port used for?" by parsing the public
list of TCP and UDP port numbers into a read-only database and serving
lookups and searches against it, with plain text or JSON output.

Parsing is pure; fetching and caching page revisions lives in ``source``.
"""

__all__ = [
    "__version__",
    "models",
]

__version__ = "0.5.1"
