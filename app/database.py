import time
import logging
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import OperationalError, DisconnectionError, TimeoutError as SQLTimeoutError

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False, **overrides) -> Engine:
    """
    Create a SQLAlchemy engine with a small, bounded connection pool.

    PostgreSQL gets the pool settings and a connect timeout so a dead
    database can't hang a request. SQLite keeps its dialect default pool.

    Args:
        database_url: SQLAlchemy database URL
        echo: Set to True for SQL query logging
        **overrides: Extra keyword arguments passed to create_engine

    Returns:
        Engine instance
    """
    if database_url.startswith("sqlite"):
        kwargs = {
            "connect_args": {"check_same_thread": False},
            "echo": echo,
        }
    else:
        # Using pool_pre_ping=False to avoid blocking on startup
        kwargs = {
            "pool_pre_ping": False,
            "pool_size": 5,  # Number of connections to maintain
            "max_overflow": 5,  # Additional connections beyond pool_size
            "pool_recycle": 3600,  # Recycle connections after 1 hour
            "pool_timeout": 3,  # Timeout for getting connection from pool (3 seconds)
            "echo": echo,
        }
        if database_url.startswith("postgres"):
            kwargs["connect_args"] = {"connect_timeout": 3}
    kwargs.update(overrides)
    return create_engine(database_url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def check_database_connection(
    engine: Engine,
    max_retries: int = 2,
    retry_delay: float = 0.5,
    timeout: float = 3.0,
) -> bool:
    """
    Check if database connection is available with timeout.

    Args:
        engine: Engine to check
        max_retries: Maximum number of retry attempts
        retry_delay: Delay between retries in seconds
        timeout: Maximum time to wait for connection in seconds

    Returns:
        True if connection is available, False otherwise
    """
    for attempt in range(max_retries):
        try:
            start_time = time.time()
            with engine.connect() as conn:
                if engine.dialect.name == "postgresql":
                    conn.execute(text("SET statement_timeout = '3s'"))
                conn.execute(text("SELECT 1"))
            elapsed = time.time() - start_time
            if elapsed > timeout:
                logger.warning(f"Database connection check took too long: {elapsed:.2f}s")
                return False
            return True
        except (OperationalError, DisconnectionError, SQLTimeoutError) as e:
            if attempt < max_retries - 1:
                time.sleep(retry_delay)
                continue
            logger.error(f"Database connection check failed: {str(e)}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error checking database connection: {str(e)}")
            return False
    return False
