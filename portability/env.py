import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import InvalidArgument

STORE_BACKENDS = ("memory", "json", "sqlite")
DEFAULT_STORE_PATHS = {
    "json": Path("data/jobs.json"),
    "sqlite": Path("data/jobs.db"),
}
DEV_TOKEN_SECRET = "portability-dev-secret-change-me"


def load_env() -> None:
    """Load .env from the working directory if present. Existing variables win."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


@dataclass(frozen=True)
class Settings:
    store_backend: str = "sqlite"
    store_path: Optional[Path] = DEFAULT_STORE_PATHS["sqlite"]
    token_secret: str = DEV_TOKEN_SECRET
    token_ttl: timedelta = timedelta(hours=24)
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from PORTABILITY_* variables."""
        env = os.environ if environ is None else environ

        backend = env.get("PORTABILITY_STORE_BACKEND", "sqlite").strip().lower()
        if backend not in STORE_BACKENDS:
            raise InvalidArgument(
                f"PORTABILITY_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got '{backend}'"
            )

        raw_path = env.get("PORTABILITY_STORE_PATH")
        store_path = Path(raw_path) if raw_path else DEFAULT_STORE_PATHS.get(backend)

        raw_ttl = env.get("PORTABILITY_TOKEN_TTL_HOURS", "24")
        try:
            ttl_hours = int(raw_ttl)
        except ValueError as e:
            raise InvalidArgument(f"PORTABILITY_TOKEN_TTL_HOURS must be an integer, got '{raw_ttl}'") from e

        return cls(
            store_backend=backend,
            store_path=store_path,
            token_secret=env.get("PORTABILITY_TOKEN_SECRET") or DEV_TOKEN_SECRET,
            token_ttl=timedelta(hours=ttl_hours),
            log_level=env.get("PORTABILITY_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(env.get("PORTABILITY_LOG_DIR", "logs")),
        )
