"""Console configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Console settings loaded from environment variables."""

    # Remote payroll service
    API_BASE_URL: str = "http://localhost:8080/api/v1"
    API_TOKEN: str = ""
    REQUEST_TIMEOUT_SECONDS: float = 15.0
    LIST_PAGE_SIZE: int = 100

    # Session (who is operating the console)
    USER_ID: int = 0
    EMPLOYEE_ID: int = 0
    ROLE: str = "ADMIN"

    # Derived figures
    RECENT_PAYROLL_DAYS: int = 30
    DEFAULT_LEAVE_BALANCE: int = 20

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"

    @property
    def api_base_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.API_BASE_URL.rstrip("/")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
