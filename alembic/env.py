import os
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine.url import make_url

# Load variables from .env before reading DATABASE_URL
load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from finscope.core.database import Base  # noqa: E402
from finscope.domain.users.models import User  # noqa: E402,F401
from finscope.domain.analysis.models import FinancialAnalysis  # noqa: E402,F401
from finscope.domain.receipts.models import Receipt  # noqa: E402,F401
from finscope.domain.portfolios.models import UserPortfolio  # noqa: E402,F401
from finscope.domain.trades.models import Trade  # noqa: E402,F401

target_metadata = Base.metadata


def _sync_url_from_env() -> str:
    """Convert the async DATABASE_URL into a sync one for migrations."""
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise RuntimeError("DATABASE_URL is not set.")
    url = make_url(db_url)

    if url.drivername == "sqlite+aiosqlite":
        url = url.set(drivername="sqlite+pysqlite")
    elif url.drivername == "postgresql+asyncpg":
        url = url.set(drivername="postgresql+psycopg2")

    return url.render_as_string(hide_password=False)


def _configure_sqlalchemy_url():
    config.set_main_option("sqlalchemy.url", _sync_url_from_env())


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    _configure_sqlalchemy_url()
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    _configure_sqlalchemy_url()
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
