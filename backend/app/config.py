from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_DIALECT: str = "sqlite"  # "sqlite" or "mssql"
    SQLITE_PATH: str = "./ledger.db"
    SQLSERVER_CONN_STRING: str = ""
    CREATE_SCHEMA_ON_STARTUP: bool = True
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "standard"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
