from models.base_model import Base
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool


class DBStorage:
    """Persistence client owned by the application.

    Constructed explicitly with a database URL and handed to the stores.
    Lifecycle: reload() connects and creates tables, close() ends the
    current request session, dispose() releases the engine's pool.
    """

    def __init__(self, database_url, echo=False):
        """Initialize engine for the given database URL"""
        engine_kwargs = {"echo": echo}
        if database_url.startswith("sqlite") and (":memory:" in database_url or database_url.rstrip("/") == "sqlite:"):
            # one shared connection, otherwise every session sees an empty database
            engine_kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        elif not database_url.startswith("sqlite"):
            engine_kwargs["pool_pre_ping"] = True

        self.__engine = create_engine(database_url, **engine_kwargs)
        self.__session = None

        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if self.__engine.url.get_backend_name() == "sqlite":
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def rollback(self):
        """Discard pending changes of the current session"""
        self.__session.rollback()

    def flush(self):
        """Emit pending changes without committing"""
        self.__session.flush()

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        return self.__session.get(cls, id)

    def find_one(self, cls, **filters):
        """First object of cls matching all equality filters, or None"""
        return self.__session.query(cls).filter_by(**filters).first()

    def delete_where(self, cls, **filters) -> int:
        """Bulk delete matching rows in the current transaction; returns the row count"""
        return self.__session.query(cls).filter_by(**filters).delete(synchronize_session=False)

    def count(self, cls):
        """Count objects of cls"""
        return self.__session.query(cls).count()

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    def dispose(self):
        """Close the session and release pooled connections (shutdown)"""
        self.close()
        self.__engine.dispose()

