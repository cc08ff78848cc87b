"""Top-level package for the Location Resolution Engine.

Turns a partial, user-typed place name into a ranked list of canonical
location records by consulting, in priority order, a location database,
an external geocoding API and a static gazetteer, with an in-memory
result cache in front.

Typical use:
    from location_resolver.container import Container
    from location_resolver.services import LocationResolverService

    resolver = Container.create_default().resolve(LocationResolverService)
    result = resolver.search("mum", country="India", limit=5)
"""

__version__ = "0.1.0"
