"""Core reporting logic layer.

Subpackages:
- calendar: date keys, month grids and manual service-day markers
- reporting: visit aggregation and month KPIs
- search: client relevance ranking
- rows: a single day's visit table
"""
__all__ = ["calendar", "reporting", "search", "rows"]
