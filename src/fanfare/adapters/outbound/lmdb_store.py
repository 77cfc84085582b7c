"""LMDB implementation of the KeyValueStore port.

Records live in the unnamed main database of one LMDB environment. LMDB
keeps keys in byte-lexicographic order, gives every read transaction an
MVCC snapshot and serializes writers through its own lock, which is all
the store relies on.

Layout on disk (subdir=True, the default):
    <path>/data.mdb   - B+tree pages
    <path>/lock.mdb   - reader table and writer mutex

Thread Safety:
    A store object belongs to one thread. Separate processes may read
    while one process writes.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterator

import lmdb

from fanfare.domain.exceptions import DatabaseNotFound, StorageError
from fanfare.infrastructure.config import StorageConfig, get_config
from fanfare.infrastructure.logging import get_logger
from fanfare.ports.outbound.kv_store import KeyOrderError, OpenMode

DATA_FILE = "data.mdb"

logger = get_logger(__name__)


@contextmanager
def _engine_errors(action: str) -> Generator[None, None, None]:
    """Re-raise LMDB failures as StorageError."""
    try:
        yield
    except lmdb.Error as e:
        raise StorageError(f"{action} failed: {e}") from e


class LMDBReadTransaction:
    """Read transaction over the main database of an environment."""

    def __init__(self, txn: lmdb.Transaction, db: Any) -> None:
        self._txn = txn
        self._db = db
        self._finished = False

    def get(self, key: bytes) -> bytes | None:
        with _engine_errors("get"):
            return self._txn.get(key, db=self._db)

    def count(self) -> int:
        with _engine_errors("stat"):
            return self._txn.stat(self._db)["entries"]

    def first(self) -> tuple[bytes, bytes] | None:
        with _engine_errors("cursor"), self._txn.cursor(db=self._db) as cursor:
            if not cursor.first():
                return None
            return cursor.key(), cursor.value()

    def iterate(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> Iterator[tuple[bytes, bytes]]:
        with _engine_errors("cursor"), self._txn.cursor(db=self._db) as cursor:
            positioned = cursor.first() if start is None else cursor.set_range(start)
            if not positioned:
                return
            for key, value in cursor.iternext(keys=True, values=True):
                if end is not None and key > end:
                    break
                yield key, value

    def abort(self) -> None:
        if not self._finished:
            self._finished = True
            self._txn.abort()

    def __enter__(self) -> LMDBReadTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.abort()


class LMDBWriteTransaction(LMDBReadTransaction):
    """The write transaction of an environment opened read-write."""

    def put(self, key: bytes, value: bytes) -> None:
        with _engine_errors("put"):
            self._txn.put(key, value, db=self._db)

    def append(self, key: bytes, value: bytes) -> None:
        with _engine_errors("append"):
            stored = self._txn.put(key, value, append=True, db=self._db)
        # MDB_APPEND reports a key that does not sort last as an existing key.
        if not stored:
            raise KeyOrderError(key)

    def commit(self) -> None:
        if self._finished:
            raise StorageError("transaction already finished")
        self._finished = True
        with _engine_errors("commit"):
            self._txn.commit()

    def __enter__(self) -> LMDBWriteTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._finished:
            self.commit()
        else:
            self.abort()


class LMDBKeyValueStore:
    """LMDB-backed implementation of the KeyValueStore protocol.

    Attributes:
        path: Environment directory (or data file when subdir is off).
        mode: How the environment was opened.
    """

    def __init__(
        self,
        path: str | Path,
        mode: OpenMode = OpenMode.READ_ONLY_SHARED,
        config: StorageConfig | None = None,
    ) -> None:
        """Open an LMDB environment.

        Read-write opens create the environment if needed. Read-only opens
        require an existing one.

        Raises:
            DatabaseNotFound: If opened read-only and no database exists.
            StorageError: If LMDB cannot open the environment.
        """
        self._path = Path(path)
        self._mode = mode
        self._config = config or get_config().storage

        if mode.writable:
            parent = self._path if self._config.subdir else self._path.parent
            parent.mkdir(parents=True, exist_ok=True)
        elif not self._data_file().exists():
            raise DatabaseNotFound(str(self._path))

        with _engine_errors(f"opening {self._path}"):
            self._env = lmdb.open(
                str(self._path),
                map_size=self._config.map_size,
                subdir=self._config.subdir,
                readonly=not mode.writable,
                create=mode.writable,
                max_readers=self._config.max_readers,
                sync=self._config.sync,
                lock=True,
            )
        self._db = self._env.open_db()
        self._closed = False
        logger.debug("lmdb_opened", path=str(self._path), mode=mode.value)

    def _data_file(self) -> Path:
        return self._path / DATA_FILE if self._config.subdir else self._path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def mode(self) -> OpenMode:
        return self._mode

    def begin_write(self) -> LMDBWriteTransaction:
        self._check_open()
        if not self._mode.writable:
            raise StorageError(f"{self._path} is opened read-only")
        with _engine_errors("begin write transaction"):
            txn = self._env.begin(write=True)
        return LMDBWriteTransaction(txn, self._db)

    def begin_read(self) -> LMDBReadTransaction:
        self._check_open()
        with _engine_errors("begin read transaction"):
            txn = self._env.begin(write=False)
        return LMDBReadTransaction(txn, self._db)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._env.close()

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError(f"{self._path} is closed")

    def __enter__(self) -> LMDBKeyValueStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
