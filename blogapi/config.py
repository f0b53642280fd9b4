# blogapi/config.py
import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class DatabaseConfig:
    """Store connection settings (SQLite by default, PostgreSQL when USE_POSTGRES=true)."""
    use_postgres: bool = False
    database_path: str = '/app/blog.db'
    host: str = 'postgresql-service'
    port: int = 5432
    database: str = 'blog'
    user: str = 'postgres'
    password: str = ''
    ssl_mode: str = 'disable'
    pool_min_size: int = 5
    pool_max_size: int = 20

    @property
    def ssl_enabled(self) -> bool:
        # asyncpg uses the ssl parameter, not sslmode
        return self.ssl_mode.lower() not in ('disable', 'false', 'no', '0')

    def postgres_kwargs(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'database': self.database,
            'user': self.user,
            'password': self.password,
            'ssl': self.ssl_enabled,
        }


@dataclass
class ServerConfig:
    """Blog API 서버 실행 설정"""
    host: str = '0.0.0.0'
    port: int = 8005
    allowed_origins: List[str] = field(default_factory=lambda: ['*'])
    log_level: str = 'INFO'


@dataclass
class ClientConfig:
    """API client settings."""
    base_url: str = 'http://localhost:8005/api'
    timeout: float = 10.0


@dataclass
class Config:
    database: DatabaseConfig
    server: ServerConfig
    client: ClientConfig


def load_config(environ: Optional[Dict[str, str]] = None) -> Config:
    """Build the configuration from environment variables (or ``environ``)."""
    env = os.environ if environ is None else environ
    get = env.get

    database = DatabaseConfig(
        use_postgres=get('USE_POSTGRES', 'false').lower() == 'true',
        database_path=get('DATABASE_PATH', get('BLOG_DATABASE_PATH', '/app/blog.db')),
        host=get('POSTGRES_HOST', 'postgresql-service'),
        port=int(get('POSTGRES_PORT', '5432')),
        database=get('POSTGRES_DB', 'blog'),
        user=get('POSTGRES_USER', 'postgres'),
        password=get('POSTGRES_PASSWORD', ''),
        ssl_mode=get('POSTGRES_SSLMODE', 'disable'),
    )
    server = ServerConfig(
        host=get('HOST', '0.0.0.0'),
        port=int(get('PORT', '8005')),
        allowed_origins=[o.strip() for o in get('ALLOWED_ORIGINS', '*').split(',') if o.strip()],
        log_level=get('LOG_LEVEL', 'INFO').upper(),
    )
    client = ClientConfig(
        base_url=get('BLOG_API_URL', 'http://localhost:8005/api'),
        timeout=float(get('BLOG_API_TIMEOUT', '10')),
    )

    if database.use_postgres:
        logger.info("🐘 Using PostgreSQL database for blog posts")
    else:
        logger.info("💾 Using SQLite database for blog posts")

    return Config(database=database, server=server, client=client)


# Prometheus Metrics Configuration
REQUEST_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    10.0,
)

# Listing defaults
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# keeps (page - 1) * limit inside a signed 64-bit OFFSET
MAX_PAGE = (2 ** 63 - 1) // MAX_LIMIT
