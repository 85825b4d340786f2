import os

from alembic import context
from sqlalchemy import engine_from_config, pool

from backend.app.db.tables import metadata


config = context.config

url = os.getenv("ALEMBIC_DATABASE_URL")
if not url:
    raise RuntimeError("ALEMBIC_DATABASE_URL must be set to run migrations")
config.set_main_option("sqlalchemy.url", url)

target_metadata = metadata


def run_migrations_offline() -> None:
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
