"""
Word Builder - Client for an interactive word-construction game.

The game grows a word one letter at a time at either end. A remote
builder service decides which letters are allowed and whether the
result is a word; this package provides:
- Async clients for the builder and dictionary services
- The session controller (state machine) and its startup recovery
- Persistence of the session token across restarts
- A terminal front end
"""

__version__ = "0.1.0"
