import os
from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional, Dict, Any, Callable

load_dotenv()


class EnvConfig:
    """Small helper for reading and casting environment variables.

    Usage: EnvConfig.get('NEWS_API_URL', cast=str, aliases=['NEWS_URL'])
    """

    @staticmethod
    def get(name: str, default: Any = None, cast: Optional[Callable] = None, aliases: Optional[list] = None):
        aliases = aliases or []
        for key in (name, *aliases):
            val = os.getenv(key)
            if val is not None:
                if cast is not None:
                    try:
                        return cast(val)
                    except Exception as exc:  # keep error explicit
                        raise ValueError(f"Invalid value for {key}: {exc}")
                return val
        return default


def _parse_capacity(value: str) -> Optional[int]:
    """Parse a cache capacity; '0', 'none' and 'unbounded' mean no limit."""
    if value.strip().lower() in ('', '0', 'none', 'unbounded'):
        return None
    return int(value)


@dataclass
class BaseConfig:
    """Mixin-like helper for dataclasses that load from envs and validate."""

    @classmethod
    def _env(cls, name: str, default: Any = None, cast: Optional[Callable] = None, aliases: Optional[list] = None):
        return EnvConfig.get(name, default=default, cast=cast, aliases=aliases)

    def validate(self, required: bool = True):
        """Default no-op; override in subclasses with required flag."""
        return None


@dataclass
class ClaudeConfig(BaseConfig):
    api_key: Optional[str] = None
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 3000
    temperature: float = 0.0
    timeout_seconds: float = 120.0

    def __post_init__(self):
        self.api_key = self.api_key or self._env('ANTHROPIC_API_KEY', aliases=['CLAUDE_API_KEY'])
        # Respect explicit constructor values: only consult env vars when using the dataclass defaults
        if self.model == ClaudeConfig.model:
            self.model = self._env('CLAUDE_MODEL', default=self.model)
        if self.max_tokens == ClaudeConfig.max_tokens:
            tokens = self._env('CLAUDE_MAX_TOKENS', default=None, cast=int)
            if tokens is not None:
                self.max_tokens = tokens
        if self.temperature == ClaudeConfig.temperature:
            temp = self._env('CLAUDE_TEMPERATURE', default=None, cast=float)
            if temp is not None:
                self.temperature = temp
        if self.timeout_seconds == ClaudeConfig.timeout_seconds:
            timeout = self._env('CLAUDE_TIMEOUT_SECONDS', default=None, cast=float)
            if timeout is not None:
                self.timeout_seconds = timeout

    def validate(self, required: bool = True) -> None:
        if required and not self.api_key:
            raise ValueError('ANTHROPIC_API_KEY not set. Set via environment or ClaudeConfig.api_key')
        if self.max_tokens < 100:
            raise ValueError('max_tokens must be >= 100')
        if not 0 <= self.temperature <= 1:
            raise ValueError('temperature must be between 0 and 1')
        if self.timeout_seconds <= 0:
            raise ValueError('timeout_seconds must be > 0')


@dataclass
class NewsConfig(BaseConfig):
    base_url: str = "https://news-api.jona-581.workers.dev/"
    timeout_seconds: float = 15.0

    def __post_init__(self):
        if self.base_url == NewsConfig.base_url:
            self.base_url = self._env('NEWS_API_URL', default=self.base_url)
        if self.timeout_seconds == NewsConfig.timeout_seconds:
            timeout = self._env('NEWS_TIMEOUT_SECONDS', default=None, cast=float)
            if timeout is not None:
                self.timeout_seconds = timeout

    def validate(self, required: bool = True) -> None:
        if not self.base_url.startswith(('http://', 'https://')):
            raise ValueError('NEWS_API_URL must be an http(s) URL')
        if self.timeout_seconds <= 0:
            raise ValueError('timeout_seconds must be > 0')


@dataclass
class DatabaseConfig(BaseConfig):
    url: Optional[str] = None
    table: str = "salesforce_data"

    def __post_init__(self):
        self.url = self.url or self._env('DATABASE_URL', default='sqlite:///reporter.db')
        if self.table == DatabaseConfig.table:
            self.table = self._env('FINANCIALS_TABLE', default=self.table)

    def validate(self, required: bool = True) -> None:
        if required and not self.url:
            raise ValueError('DATABASE_URL not set in environment')
        if not self.table.replace('_', '').isalnum():
            raise ValueError('table must be a plain SQL identifier')


@dataclass
class CacheConfig(BaseConfig):
    capacity: Optional[int] = 256

    def __post_init__(self):
        if self.capacity == CacheConfig.capacity:
            self.capacity = self._env('REPORT_CACHE_CAPACITY', default=self.capacity, cast=_parse_capacity)

    def validate(self, required: bool = True) -> None:
        if self.capacity is not None and self.capacity < 1:
            raise ValueError('capacity must be >= 1 or None for an unbounded cache')


class AppConfig:
    """Central application configuration container.

    Access sub-configs as attributes (e.g., `AppConfig.claude`).
    Use `AppConfig.from_env()` for a validated instance reflecting the
    current environment.
    """

    claude: ClaudeConfig = ClaudeConfig()
    news: NewsConfig = NewsConfig()
    database: DatabaseConfig = DatabaseConfig()
    cache: CacheConfig = CacheConfig()

    @staticmethod
    def validate_all(strict: bool = False) -> None:
        AppConfig.claude.validate(required=strict)
        AppConfig.news.validate()
        AppConfig.database.validate(required=strict)
        AppConfig.cache.validate()

    @staticmethod
    def check_availability() -> Dict[str, Dict[str, Any]]:
        """Return availability map for each config.

        For each named sub-config return a dict with keys:
        - available: bool
        - reason: Optional[str] explaining failure when available is False
        """
        results: Dict[str, Dict[str, Any]] = {}
        # Construct fresh instances so availability reflects current environment
        configs = {
            'claude': ClaudeConfig(),
            'news': NewsConfig(),
            'database': DatabaseConfig(),
            'cache': CacheConfig(),
        }
        for name, cfg in configs.items():
            try:
                cfg.validate(required=True)
                results[name] = {'available': True, 'reason': None}
            except Exception as e:
                results[name] = {'available': False, 'reason': str(e)}
        return results

    @staticmethod
    def from_env(strict: bool = False) -> 'AppConfig':
        config = AppConfig()
        config.validate_all(strict=strict)
        return config
