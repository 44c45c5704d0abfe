"""
app/readers package marker.
"""

from app.readers.tabular_reader import ParsedTable, TabularReader

__all__ = [
    "ParsedTable",
    "TabularReader",
]
