"""Gazetteer adapters - Implementations of GazetteerPort.

Available implementations:
- StaticGazetteer: Curated in-memory table loaded from a CSV file
"""

from .static_gazetteer import StaticGazetteer

__all__ = ["StaticGazetteer"]
