"""
=============================================================================
HANDLERS MODULE
=============================================================================

Connection handlers: callables that take an accepted Connection, run the
request pipeline on it, and close it.

The file server has exactly one, StaticFileHandler.

=============================================================================
"""

from .static import StaticFileHandler, HandleOutcome

__all__ = [
    "StaticFileHandler",
    "HandleOutcome",
]
