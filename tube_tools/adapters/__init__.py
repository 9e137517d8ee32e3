"""Tool Adapters.

Available adapters:
- youtube: YouTube Data API v3 (search, details, trending, keyword research)
"""

__all__ = ["youtube"]
