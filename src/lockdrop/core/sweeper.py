"""Background removal of expired blobs."""

import logging
import threading

from .exceptions import StorageError
from .storage import BlobStorage


logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Runs ``storage.sweep_expired()`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, storage: BlobStorage, interval: float):
        self.storage = storage
        self.interval = float(interval)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self.interval <= 0 or self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, name="lockdrop-sweeper", daemon=True
        )
        self._thread.start()
        logger.info("Expiry sweeper running every %.0fs", self.interval)

    def run_once(self) -> int:
        try:
            return self.storage.sweep_expired()
        except (StorageError, OSError) as e:
            # retried on the next pass
            logger.error("Expiry sweep failed: %s", e)
            return 0

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
