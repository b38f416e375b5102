"""Configuration management for loan-service."""

from dataclasses import dataclass, field
from datetime import time

from loan_service.exceptions import ConfigurationError


@dataclass
class DatabaseConfig:
    """Database connection configuration."""

    url: str = "sqlite:///loans.db"
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        """Whether the URL points to a SQLite database."""
        return self.url.startswith("sqlite")


@dataclass
class RemoteServiceConfig:
    """Upstream HTTP service configuration."""

    base_url: str
    timeout_seconds: float = 5.0
    health_path: str = "/actuator/health"  # absolute, ignores the base path

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
        self.base_url = self.base_url.rstrip("/")


@dataclass
class LoanRules:
    """Lending business rules."""

    max_active_loans: int = 5

    def __post_init__(self) -> None:
        if self.max_active_loans < 1:
            raise ConfigurationError(f"max_active_loans must be at least 1, got {self.max_active_loans}")


@dataclass
class SweeperConfig:
    """Overdue sweep scheduling."""

    enabled: bool = True
    run_at: str = "06:00"  # local time of day, HH:MM

    @property
    def run_at_time(self) -> time:
        """Parse ``run_at`` into a ``datetime.time``."""
        try:
            hours, minutes = self.run_at.split(":")
            return time(int(hours), int(minutes))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid sweep time {self.run_at!r}, expected HH:MM") from exc


@dataclass
class LoanServiceConfig:
    """Main configuration for loan-service."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    books: RemoteServiceConfig = field(
        default_factory=lambda: RemoteServiceConfig(base_url="http://localhost:8082/api")
    )
    users: RemoteServiceConfig = field(
        default_factory=lambda: RemoteServiceConfig(base_url="http://localhost:8081/api")
    )
    rules: LoanRules = field(default_factory=LoanRules)
    sweeper: SweeperConfig = field(default_factory=SweeperConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LoanServiceConfig":
        """Create config from environment variables."""
        import os

        try:
            timeout = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "5"))
            max_active_loans = int(os.getenv("MAX_ACTIVE_LOANS", "5"))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        database = DatabaseConfig(
            url=os.getenv("DATABASE_URL", "sqlite:///loans.db"),
            echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
        )

        books = RemoteServiceConfig(
            base_url=os.getenv("BOOKS_SERVICE_URL", "http://localhost:8082/api"),
            timeout_seconds=timeout,
        )

        users = RemoteServiceConfig(
            base_url=os.getenv("USERS_SERVICE_URL", "http://localhost:8081/api"),
            timeout_seconds=timeout,
        )

        sweeper = SweeperConfig(
            enabled=os.getenv("SWEEP_ENABLED", "true").lower() == "true",
            run_at=os.getenv("SWEEP_RUN_AT", "06:00"),
        )
        # fail fast on a malformed schedule
        sweeper.run_at_time

        return cls(
            database=database,
            books=books,
            users=users,
            rules=LoanRules(max_active_loans=max_active_loans),
            sweeper=sweeper,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
