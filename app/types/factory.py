from abc import ABC, abstractmethod

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils.config import Settings


class Factory(ABC):
    """
    A factory fills the tables of its module with demo data. Factories are run at startup
    when the `USE_FACTORIES` setting is enabled, see `app.utils.initialization.run_factories`.

    Factories listed in `depends_on` are run first.
    """

    depends_on: list[type["Factory"]]

    @classmethod
    @abstractmethod
    async def should_run(cls, db: AsyncSession) -> bool:
        """
        Return False if the data was already created, running the factory twice would break unique constraints
        """

    @classmethod
    @abstractmethod
    async def run(cls, db: AsyncSession, settings: Settings) -> None:
        """
        Add the demo data to the session. The caller commits it.
        """
