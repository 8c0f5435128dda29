"""Relational database handle built from an explicit configuration.

A :class:`Database` owns one DB-API connection, opened lazily on first use
from a :class:`ConnectionConfig`. Applications typically build it once at
startup through :func:`open_database`, which reports failure as a
:class:`ConnectResult` instead of raising:

    >>> result = open_database(ConnectionConfig(dsn="sqlite::memory:"))
    >>> if not result.success:
    ...     raise SystemExit(str(result.error))
    >>> db = result.database
    >>> db.exec("CREATE TABLE hits (ip TEXT, epoch INTEGER)")
    0
    >>> stmt = db.prepare("INSERT INTO hits VALUES (:ip, :epoch)")
    >>> stmt.execute({"ip": "192.0.2.1", "epoch": 1400538656})
    True

DSNs take the form ``driver:target``. The built-in ``sqlite`` driver accepts
``sqlite:/path/to/file.sqlite3`` and ``sqlite::memory:``; other drivers can
be added with :func:`register_driver`.
"""

import os
import sqlite3
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger

from pickset.exceptions import DatabaseConfigError, DatabaseConnectError, DatabaseError

if TYPE_CHECKING:
    from loguru import Logger

# (target, username, password) -> DB-API 2.0 connection
Driver = Callable[[str, str | None, str | None], Any]

Params = Sequence[Any] | Mapping[str, Any]


def _connect_sqlite(target: str, username: str | None, password: str | None) -> Any:
    # SQLite has no authentication, so credentials are ignored
    return sqlite3.connect(target, autocommit=True)


_DRIVERS: dict[str, Driver] = {"sqlite": _connect_sqlite}


def register_driver(name: str, factory: Driver) -> None:
    """
    Make a DSN prefix available to :class:`Database`.

    Args:
        name: DSN prefix, e.g. "postgres" for "postgres:host=db dbname=app"
        factory: Callable taking (target, username, password) and returning
            a DB-API 2.0 connection
    """
    _DRIVERS[name.lower()] = factory


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection settings for a :class:`Database`.

    Attributes:
        dsn: Connection string in "driver:target" form
        username: Username, for drivers that need one
        password: Password, for drivers that need one
    """

    dsn: str | None
    username: str | None = None
    password: str | None = field(default=None, repr=False)

    @classmethod
    def from_env(
        cls, prefix: str = "PICKSET_DB_", environ: Mapping[str, str] | None = None
    ) -> "ConnectionConfig":
        """Read ``{prefix}DSN``, ``{prefix}USERNAME`` and ``{prefix}PASSWORD``."""
        env = os.environ if environ is None else environ
        return cls(
            dsn=env.get(f"{prefix}DSN"),
            username=env.get(f"{prefix}USERNAME"),
            password=env.get(f"{prefix}PASSWORD"),
        )

    def split_dsn(self) -> tuple[str, str]:
        """Return (driver, target) from the DSN.

        Raises:
            DatabaseConfigError: If no DSN is set or it has no driver prefix
        """
        if not self.dsn:
            raise DatabaseConfigError(
                "No connection string has been configured.\n"
                "Hint: ConnectionConfig(dsn='sqlite:/path/to/db.sqlite3')"
            )
        driver, sep, target = self.dsn.partition(":")
        if not driver or not sep or not target:
            raise DatabaseConfigError(
                f"Malformed connection string: {self.dsn!r}\n"
                f"Expected 'driver:target', e.g. 'sqlite::memory:'"
            )
        return driver.lower(), target


def _error_code(error: Exception) -> str:
    return getattr(error, "sqlite_errorname", None) or type(error).__name__


class PreparedStatement:
    """A statement bound to a :class:`Database`, executed on demand.

    Parameters can be bound one at a time with :meth:`bind` (names for
    ``:name`` placeholders, 1-based positions for ``?`` placeholders) or
    passed directly to :meth:`execute`.
    """

    def __init__(self, database: "Database", statement: str):
        self.database: Database = database
        self.statement: str = statement
        self._bound: dict[str | int, Any] = {}
        self._cursor: Any = None

    def bind(self, key: str | int, value: Any) -> None:
        self._bound[key] = value

    def _bound_params(self) -> Params:
        if all(isinstance(key, int) for key in self._bound):
            return tuple(self._bound[key] for key in sorted(self._bound))  # type: ignore
        return {str(key): value for key, value in self._bound.items()}

    def execute(self, params: Params | None = None) -> bool:
        """Run the statement with ``params``, or the bound values if omitted.

        Raises:
            DatabaseError: If the driver rejects the statement
        """
        if params is None:
            params = self._bound_params()
        self._cursor = self.database._run(self.statement, params)
        return True

    def _executed(self) -> Any:
        if self._cursor is None:
            raise DatabaseError(
                f"Statement has not been executed: {self.statement!r}\n"
                f"Hint: call execute() before fetching rows"
            )
        return self._cursor

    def fetchone(self) -> Any:
        return self._executed().fetchone()

    def fetchall(self) -> list[Any]:
        return self._executed().fetchall()

    @property
    def rowcount(self) -> int:
        return max(self._executed().rowcount, 0)


class Database:
    """Lazily connected handle for one relational database.

    The connection is opened the first time it is needed; call :meth:`init`
    to open it eagerly and surface configuration problems early.
    """

    def __init__(self, config: ConnectionConfig, log: "Logger" = logger):
        self.config: ConnectionConfig = config
        self._log: Logger = log
        self._connection: Any = None
        self._last_cursor: Any = None
        self._last_error: tuple[str, str] | None = None

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connection(self) -> Any:
        """The underlying DB-API connection, opened on first access."""
        if self._connection is None:
            self._connection = self._open()
        return self._connection

    def _open(self) -> Any:
        try:
            driver_name, target = self.config.split_dsn()
            if driver_name not in _DRIVERS:
                valid = ", ".join(sorted(_DRIVERS))
                raise DatabaseConfigError(
                    f"Unknown database driver '{driver_name}'. "
                    f"Registered drivers: {valid}"
                )
        except DatabaseConfigError as e:
            self._log.error(f"Database configuration error: {e}")
            raise

        try:
            connection = _DRIVERS[driver_name](
                target, self.config.username, self.config.password
            )
        except Exception as e:
            self._log.error(f"Could not connect to {driver_name} database: {e}")
            raise DatabaseConnectError(str(e), code=_error_code(e)) from e

        self._log.debug(f"Connected to {driver_name} database")
        return connection

    def init(self) -> None:
        """Open the connection now instead of on first use.

        Raises:
            DatabaseConfigError: If no usable DSN is configured
            DatabaseConnectError: If the driver fails to connect
        """
        _ = self.connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._last_cursor = None
        self._last_error = None

    def _run(self, statement: str, params: Params = ()) -> Any:
        cursor = self.connection.cursor()
        try:
            cursor.execute(statement, params)
        except Exception as e:
            cursor.close()
            self._last_error = (_error_code(e), str(e))
            raise DatabaseError(
                f"Statement failed: {e}\nStatement: {statement}",
                code=self._last_error[0],
            ) from e
        self._last_error = None
        self._last_cursor = cursor
        return cursor

    def prepare(self, statement: str) -> PreparedStatement:
        """Return a statement that binds parameters before running.

        Prefer this over :meth:`exec` and :meth:`query` whenever any part of
        the statement comes from user input.
        """
        return PreparedStatement(self, statement)

    def exec(self, statement: str) -> int:
        """Run a statement without parameters and return the affected row count.

        Never pass user input here; use :meth:`prepare` instead.
        """
        return max(self._run(statement).rowcount, 0)

    def query(self, statement: str) -> Any:
        """Run a statement without parameters and return its cursor.

        Never pass user input here; use :meth:`prepare` instead.
        """
        return self._run(statement)

    def error_code(self) -> str | None:
        """Error code of the last statement, or None if it succeeded."""
        return self._last_error[0] if self._last_error else None

    def error_info(self) -> tuple[str, str] | None:
        """(code, message) of the last statement, or None if it succeeded."""
        return self._last_error

    def last_insert_id(self) -> int | None:
        """Row id of the last inserted row, if the driver reports one."""
        return getattr(self._last_cursor, "lastrowid", None)


@dataclass(frozen=True)
class ConnectResult:
    """Outcome of :func:`open_database`.

    Attributes:
        success: True if the connection was opened
        database: The connected handle if successful, None if failed
        error: The configuration or connection error if failed, None if successful
    """

    success: bool
    database: Database | None
    error: DatabaseError | None


def open_database(config: ConnectionConfig, log: "Logger" = logger) -> ConnectResult:
    """
    Build a :class:`Database` and connect it immediately.

    Failures are logged through ``log`` and returned rather than raised.

    Args:
        config: Connection settings
        log: Logger that receives connection errors

    Returns:
        ConnectResult holding either the connected database or the error
    """
    database = Database(config, log=log)
    try:
        database.init()
    except DatabaseError as e:
        return ConnectResult(success=False, database=None, error=e)
    return ConnectResult(success=True, database=database, error=None)
