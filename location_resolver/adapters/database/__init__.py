"""Database adapters - Implementations of LocationDatabasePort.

Available implementations:
- SqlAlchemyLocationDatabase: cities/states/countries tables via SQLAlchemy
"""

from .sqlalchemy_repository import SqlAlchemyLocationDatabase, create_database_engine
from .tables import Base, CityRow, CountryRow, StateRow

__all__ = [
    "SqlAlchemyLocationDatabase",
    "create_database_engine",
    "Base",
    "CityRow",
    "CountryRow",
    "StateRow",
]
