"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Location database (SQLAlchemy)
- Geocoding services (GeoNames)
- Country reference data (REST Countries)
- Static gazetteer (CSV)
- Caching systems (in-memory, null)
"""
