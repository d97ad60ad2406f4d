"""Database configuration and initialization."""
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()


def _engine_options(database_uri, echo):
    """Pool settings per backend; SQLite (tests, local) uses a single shared connection."""
    if database_uri.startswith('sqlite'):
        return {
            'echo': echo,
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False},
        }
    return {
        'echo': echo,
        'pool_pre_ping': True,  # Enable connection health checks
        'pool_size': 10,
        'max_overflow': 20,
    }


def init_db(app):
    """
    Initialize database connection for an app.

    The engine and the scoped session are stored in ``app.extensions``
    instead of module globals, so every app instance owns its own pool.

    Returns:
        scoped_session bound to the new engine
    """
    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = create_engine(
        database_uri,
        **_engine_options(database_uri, app.config.get('SQLALCHEMY_ECHO', False))
    )

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    app.extensions['db_engine'] = engine
    app.extensions['db_session'] = db_session

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()

    return db_session


def create_tables(engine):
    """Create every table registered on Base."""
    # Import models so they register with Base.metadata
    from shop import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_tables(engine):
    """Drop every table registered on Base."""
    from shop import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)
