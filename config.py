from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Intake API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_intake.db"
    cors_origins: str = "http://localhost:5000,http://127.0.0.1:5000"

    # Local blob store for identity documents
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite


settings = Settings()
