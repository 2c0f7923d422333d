"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from seatlock.platform.config.core_setting import Settings
from seatlock.platform.database.orm_db_setting import Database
from seatlock.platform.database.unit_of_work import SqlAlchemyUnitOfWork


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager, event-loop aware)
    database = providers.Singleton(Database)

    # One unit of work per use-case call; use cases receive `unit_of_work.provider`
    unit_of_work = providers.Factory(SqlAlchemyUnitOfWork, database=database)


container = Container()


def setup() -> None:
    container.config_service()
    container.database()


def cleanup() -> None:
    container.reset_singletons()
