import logging
import logging.handlers
from pathlib import Path

from pydantic_settings import BaseSettings

from .errors import ConfigError

DEFAULT_OPENROUTER_MODEL = "openai/gpt-4o-mini"

_REDIS_SCHEMES = ("redis://", "rediss://", "unix://")


class Settings(BaseSettings):
    openrouter_api_key: str = ""
    openrouter_model: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    redis_url: str = ""

    # hh.ru
    hh_base_url: str = "https://api.hh.ru"
    hh_user_agent: str = "jobradar/1.0 (job-search backend)"
    hh_api_token: str = ""

    # Analyzer
    analyze_cache_ttl_seconds: int = 60 * 60 * 12
    analyze_timeout_seconds: float = 45.0
    analyze_max_tokens: int = 600
    analyze_retries: int = 2
    rate_limit_analyze: str = "20/minute"

    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_max_bytes: int = 10_485_760  # 10 MB
    log_backup_count: int = 5

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def effective_openrouter_model(self) -> str:
        return self.openrouter_model.strip() or DEFAULT_OPENROUTER_MODEL

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def validate_required(self) -> None:
        """Fail fast on missing or malformed settings the service cannot run without."""
        problems = []
        if not self.openrouter_api_key.strip():
            problems.append("OPENROUTER_API_KEY: missing")
        if not self.redis_url.strip():
            problems.append("REDIS_URL: missing")
        elif not self.redis_url.startswith(_REDIS_SCHEMES):
            problems.append(f"REDIS_URL: unsupported scheme in {self.redis_url.split('://', 1)[0]!r}")
        if problems:
            raise ConfigError("Invalid environment variables:\n" + "\n".join(problems))


settings = Settings()


def _rotating_handler(path: Path, level: int, config: Settings, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=config.log_max_bytes,
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Settings | None = None) -> None:
    """Route the root logger to the console, ``app.log`` and ``error.log``.

    The console follows ``LOG_LEVEL``. ``app.log`` keeps every record with
    caller details and ``error.log`` keeps ERROR and above. Both files rotate
    at ``LOG_MAX_BYTES``. Calling again replaces the previous handlers.
    """
    config = config or settings
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, config.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    root.addHandler(console)

    detailed = logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root.addHandler(_rotating_handler(log_dir / "app.log", logging.DEBUG, config, detailed))
    root.addHandler(_rotating_handler(log_dir / "error.log", logging.ERROR, config, detailed))

    # upstream clients log every request at INFO
    for name in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging to %s at %s", log_dir, logging.getLevelName(level))
