from pathlib import Path
from typing import List, Optional, Union
from pydantic import AnyHttpUrl, validator
from pydantic_settings import BaseSettings

APP_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    PROJECT_NAME: str = "Litigation Scanner API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "API for scanning CourtListener dockets for lawsuits involving tracked companies"
    API_V1_STR: str = "/api/v1"

    # CORS
    # Set to True to allow requests from any origin (useful for development)
    ALLOW_ALL_ORIGINS: bool = True

    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    # DATABASE_URL wins when set, otherwise the URL is composed from the DB_* parts
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "lawsuits"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # CourtListener API
    COURTLISTENER_API_KEY: str
    COURTLISTENER_BASE_URL: str = "https://www.courtlistener.com/api/rest/v4"
    COURTLISTENER_WEB_ORIGIN: str = "https://www.courtlistener.com"
    REQUEST_TIMEOUT: float = 30.0  # seconds

    # Scanning
    SEARCH_DELAY_SECONDS: float = 1.0
    SEARCH_MAX_ATTEMPTS: int = 3
    SEARCH_RETRY_BASE_DELAY: float = 0.5
    DEFAULT_HOURS_BACK: int = 168  # 7 days
    COMPANIES_FILE: str = str(APP_DIR / "data" / "companies.json")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra fields in the .env file

settings = Settings()
