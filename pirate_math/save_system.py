from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from pathlib import Path

from .game_data import PlayerState

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

STORAGE_KEY = "pirateGameData"

SAVE_PATH_ENV = "PIRATE_MATH_SAVE_PATH"


def default_save_path() -> Path:
    explicit = os.environ.get(SAVE_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".pirate_math_save.sqlite3"


def open_db(path: Path) -> sqlite3.Connection:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        _migrate(conn)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS save_slot (
                key TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                saved_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


class SaveStore:
    """Single save slot holding the whole PlayerState as one JSON blob.

    Each call opens and closes its own connection; the game saves rarely
    (after a battle, a purchase or a settings change).
    """

    def __init__(self, path: Path | None = None, *, key: str = STORAGE_KEY) -> None:
        self._path = path if path is not None else default_save_path()
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def save_game(self, state: PlayerState) -> bool:
        payload = json.dumps(state.to_dict())
        try:
            conn = open_db(self._path)
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO save_slot(key, data, saved_at_utc) VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET data=excluded.data, saved_at_utc=excluded.saved_at_utc
                        """,
                        (self._key, payload, _utc_now_iso()),
                    )
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to save game to {self._path}: {e}")
            return False
        logger.info("Game saved successfully")
        return True

    def load_game(self) -> PlayerState | None:
        raw = self._read_raw()
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.error(f"Failed to load game: corrupt save data ({e})")
            return None
        logger.info("Game loaded successfully")
        return PlayerState.from_dict(data)

    def has_save_data(self) -> bool:
        return self._read_raw() is not None

    def reset_game(self) -> PlayerState:
        """Delete the save slot and return a fresh default state."""

        if self._path.exists():
            try:
                conn = open_db(self._path)
                try:
                    with conn:
                        conn.execute("DELETE FROM save_slot WHERE key = ?", (self._key,))
                finally:
                    conn.close()
            except (sqlite3.Error, OSError) as e:
                logger.error(f"Failed to reset game: {e}")
                raise
        logger.info("Game data reset")
        return PlayerState()

    def export_save(self, dest: Path | None = None) -> Path | None:
        """Write the saved state as indented JSON. Returns None if nothing is saved.

        ``dest`` may be a directory (a timestamped file name is generated) or
        a file path.
        """

        state = self.load_game()
        if state is None:
            return None

        file_name = f"pirate-game-save-{int(time.time() * 1000)}.json"
        if dest is None:
            target = Path.cwd() / file_name
        elif dest.is_dir():
            target = dest / file_name
        else:
            target = dest

        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_suffix(f"{target.suffix}.tmp")
        tmp_path.write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
        tmp_path.replace(target)
        return target

    def import_save(self, src: Path) -> PlayerState:
        """Load an exported JSON file into the save slot."""

        try:
            data = json.loads(src.read_text(encoding="utf-8"))
        except ValueError as e:
            raise ValueError(f"Not a valid save file: {src}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Not a valid save file: {src}")

        state = PlayerState.from_dict(data)
        if not self.save_game(state):
            raise OSError(f"Could not write save slot at {self._path}")
        return state

    def _read_raw(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            conn = open_db(self._path)
            try:
                row = conn.execute("SELECT data FROM save_slot WHERE key = ?", (self._key,)).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to load game from {self._path}: {e}")
            return None
        return None if row is None else str(row[0])
