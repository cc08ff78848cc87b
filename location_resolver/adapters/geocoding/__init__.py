"""Geocoding adapters - Implementations of GeocodingSourcePort.

Available implementations:
- GeoNamesGeocodingAdapter: GeoNames populated-place search
"""

from .geonames_adapter import GeoNamesGeocodingAdapter, GeoNamesRecord

__all__ = ["GeoNamesGeocodingAdapter", "GeoNamesRecord"]
