# Overview: Flask extension instances shared by models, services and the CLI.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event

db = SQLAlchemy()
migrate = Migrate(compare_type=True)


def configure_sqlite(engine) -> None:
    """
    Make pysqlite honor BEGIN/SAVEPOINT and enforce foreign keys.

    pysqlite defers BEGIN until the first DML statement, which breaks nested
    savepoints; emitting BEGIN ourselves gives SQLite the same transaction
    shape as PostgreSQL.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")
