from typing import List

from jose import JWTError, jwt
from pydantic import AnyHttpUrl, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

ASYNC_POSTGRES_SCHEME = "postgresql+asyncpg"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Client Agenda"
    VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    # Store
    DATABASE_URL: str
    SUPABASE_URL: AnyHttpUrl
    SUPABASE_KEY: str

    @field_validator("DATABASE_URL")
    @classmethod
    def check_database_url(cls, value: str) -> str:
        try:
            make_url(value)
        except ArgumentError as e:
            raise ValueError(f"DATABASE_URL is not a valid connection string: {e}") from e
        return value

    @field_validator("SUPABASE_KEY")
    @classmethod
    def check_service_key(cls, value: str) -> str:
        if len(value.split(".")) != 3:
            raise ValueError(
                "SUPABASE_KEY must be a JWT with three dot-separated parts. "
                "Copy the service_role key from the project dashboard again."
            )
        try:
            jwt.get_unverified_claims(value)
        except JWTError as e:
            raise ValueError(f"SUPABASE_KEY claims could not be decoded: {e}") from e
        return value

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        url = make_url(self.DATABASE_URL)
        if url.drivername in ("postgres", "postgresql"):
            url = url.set(drivername=ASYNC_POSTGRES_SCHEME)
        return url.render_as_string(hide_password=False)

    @computed_field
    @property
    def SERVICE_ROLE(self) -> str:
        # Row-level policies are scoped to the role the service key was issued for
        claims = jwt.get_unverified_claims(self.SUPABASE_KEY)
        return claims.get("role") or "service_role"

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


settings = Settings()
