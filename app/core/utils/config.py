import tomllib
from functools import cached_property
from pathlib import Path
from typing import ClassVar

from pydantic import computed_field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from app.modules.recommendation.types_recommendation import RecommendationSchemaType
from app.types.exceptions import (
    DotenvInvalidVariableError,
    DotenvMissingVariableError,
)


class Settings(BaseSettings):
    """
    Configuration of the Recommendations API.

    Each field is read from, by order of precedence:
    1. an argument given to the constructor
    2. an environment variable
    3. the yaml file, `config.yaml` in production
    4. the dotenv file, `.env` in production

    See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
    Endpoints should access the settings through the `get_settings` dependency, which tests override.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="config.yaml",
        case_sensitive=False,
        extra="ignore",
    )

    # pydantic-settings accepts an `_env_file` argument but no `_yaml_file` one
    # See https://github.com/pydantic/pydantic-settings/issues/259
    # The yaml path is stored on the class before the sources are built
    _yaml_file: ClassVar[str]

    def __init__(self, _yaml_file, _env_file, **kwargs):
        Settings._yaml_file = _yaml_file
        super().__init__(_env_file=_env_file, **kwargs)

    # Sources are listed by decreasing precedence
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_file),
            dotenv_settings,
        )

    ########################
    # Application settings #
    ########################

    # Port used when the server is started with `python -m app.main` or gunicorn
    PORT: int = 4000

    # Log debug records, and keep the loggers of third party libraries
    LOG_DEBUG_MESSAGES: bool = False

    # Origins for the CORS middleware. Every origin is allowed by default.
    # See https://fastapi.tiangolo.com/tutorial/cors/
    # It should begin with 'http://' or 'https:// and should never end with a '/'
    CORS_ORIGINS: list[str] = ["*"]

    # Shape of the records stored in the `recommendations` table:
    #  - `likes`: description and likes, listed by likes descending
    #  - `message`: title and an optional message
    RECOMMENDATION_SCHEMA: RecommendationSchemaType = RecommendationSchemaType.likes

    ############################
    # PostgreSQL configuration #
    ############################
    # If set, the application use a SQLite database instead of PostgreSQL, for testing or development purposes
    SQLITE_DB: str | None = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "recResourcesDB"
    DATABASE_DEBUG: bool = False  # If True, the database will log all queries
    USE_FACTORIES: bool = (
        False  # If True, an empty database will be populated with fake data
    )

    #############################
    # pyproject.toml parameters #
    #############################

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def APP_VERSION(cls) -> str:
        with Path("pyproject.toml").open("rb") as pyproject_binary:
            pyproject = tomllib.load(pyproject_binary)
        return str(pyproject["project"]["version"])

    ######################################
    # Automatically generated parameters #
    ######################################

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def SQLALCHEMY_DATABASE_URL(cls) -> str:
        if cls.SQLITE_DB:
            return f"sqlite+aiosqlite:///./{cls.SQLITE_DB}"
        return f"postgresql+asyncpg://{cls.POSTGRES_USER}:{cls.POSTGRES_PASSWORD}@{cls.POSTGRES_HOST}:{cls.POSTGRES_PORT}/{cls.POSTGRES_DB}"

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def SQLALCHEMY_DATABASE_URL_SYNC(cls) -> str:
        # Used at startup to create the tables and run migrations
        if cls.SQLITE_DB:
            return f"sqlite:///./{cls.SQLITE_DB}"
        return f"postgresql+psycopg://{cls.POSTGRES_USER}:{cls.POSTGRES_PASSWORD}@{cls.POSTGRES_HOST}:{cls.POSTGRES_PORT}/{cls.POSTGRES_DB}"

    #######################################
    #          Fields validation          #
    #######################################

    @model_validator(mode="after")
    def check_database_settings(self) -> "Settings":
        """
        All fields are optional, but the configuration should provide SQLITE_DB or a Postgres database name
        """
        if not (self.SQLITE_DB or self.POSTGRES_DB):
            raise DotenvMissingVariableError(
                "Either SQLITE_DB or POSTGRES_DB",
            )

        return self

    @model_validator(mode="after")
    def check_cors_origins(self) -> "Settings":
        for origin in self.CORS_ORIGINS:
            if origin != "*" and origin.endswith("/"):
                raise DotenvInvalidVariableError(  # noqa: TRY003
                    f"CORS origin {origin} must not end with a trailing slash",
                )

        return self

    @model_validator(mode="after")
    def init_cached_property(self) -> "Settings":
        """
        Compute the cached properties now, so that a misconfiguration fails at startup rather than during a request
        """
        self.APP_VERSION  # noqa: B018
        self.SQLALCHEMY_DATABASE_URL  # noqa: B018
        self.SQLALCHEMY_DATABASE_URL_SYNC  # noqa: B018

        return self


def construct_prod_settings() -> Settings:
    """
    Return the production settings
    """
    return Settings(_env_file=".env", _yaml_file="config.yaml")
