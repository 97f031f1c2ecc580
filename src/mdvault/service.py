"""Top-level composition: scan first, then watch."""

from __future__ import annotations

import logging
import time

from mdvault.config import VaultConfig
from mdvault.errors import WatchError
from mdvault.scanner import scan
from mdvault.store import NoteStore
from mdvault.watcher import VaultWatcher

logger = logging.getLogger(__name__)


class VaultService:
    """Owns the store and the watcher for one vault.

    :meth:`start` is a barrier: it returns only once the initial scan has
    completed, and raises :class:`ScanError` if it did not.
    """

    def __init__(self, config: VaultConfig, *, watch: bool = True) -> None:
        self.config = config
        self.store = NoteStore()
        self.watch = watch
        self.watcher: VaultWatcher | None = None
        self.ready = False

    def start(self) -> None:
        started = time.perf_counter()
        logger.info("Indexing all files in %s", self.config.root_path)
        scan(
            self.config.root_path,
            self.config.ignore,
            self.config.private,
            store=self.store,
            strict=self.config.strict,
        )

        if self.watch:
            self.watcher = VaultWatcher(
                self.config.root_path,
                self.config.ignore,
                self.config.private,
                self.store,
                strict=self.config.strict,
            )
            self.watcher.start()

        self.ready = True
        logger.info("Ready in %.3fs with %d notes", time.perf_counter() - started, len(self.store))

    def stop(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
        self.ready = False

    @property
    def watch_error(self) -> WatchError | None:
        return self.watcher.error if self.watcher is not None else None

    def __enter__(self) -> "VaultService":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
