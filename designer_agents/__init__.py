"""Multi-Agent UI Designer.

Routes natural-language edit requests for a UI document tree to specialist
agents (pages, component creation, component updates), records everything
they do in a per-request memory log, and validates the outcome.
"""

__version__ = "1.0.0"
