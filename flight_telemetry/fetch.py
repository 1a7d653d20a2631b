"""
HTTP fetch worker for the flight display.

Runs an asyncio event loop with one aiohttp session in a QThread. Requests
are submitted from the Qt thread and identified by an integer id; results
come back through the ``fetched`` / ``failed`` signals, which Qt queues onto
the receiver's thread.
"""

import asyncio
import concurrent.futures
import itertools
import logging
import threading
from typing import Dict, List, Optional, Tuple

import aiohttp
from PyQt5 import QtCore

from .config import FETCH_TIMEOUT_S

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Server answered with a non-2xx status."""

    def __init__(self, status: int):
        super().__init__(f"HTTP error {status}")
        self.status = status


class HttpFetchWorker(QtCore.QThread):
    """
    Background HTTP client.

    Signals:
        fetched(int request_id, str body) - request completed with a 2xx status
        failed(int request_id, str error) - network error, timeout or non-2xx status
        status_update(str message) - Status messages for logging
    """

    fetched = QtCore.pyqtSignal(int, str)
    failed = QtCore.pyqtSignal(int, str)
    status_update = QtCore.pyqtSignal(str)

    def __init__(self, timeout_s: float = FETCH_TIMEOUT_S, parent=None):
        super().__init__(parent)
        self.timeout_s = timeout_s

        self._event_loop: Optional[asyncio.AbstractEventLoop] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._stopping: Optional[asyncio.Event] = None
        self._stop_requested = False

        # Guards everything below; submit/cancel run on the Qt thread
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._ready = False
        self._backlog: List[Tuple[int, str]] = []
        self._in_flight: Dict[int, concurrent.futures.Future] = {}

    def run(self):
        """Thread body: serve requests until stop() is called."""
        try:
            self._event_loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._event_loop)
            self._event_loop.run_until_complete(self._serve())
        except Exception as e:
            logger.error(f"Fetch worker error: {e}", exc_info=True)
            self.status_update.emit(f"Fetch worker failed: {e}")
        finally:
            if self._event_loop:
                self._event_loop.close()
            self.status_update.emit("Fetch worker stopped")

    async def _serve(self):
        self._stopping = asyncio.Event()
        if self._stop_requested:
            self._stopping.set()
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            self._session = session
            with self._lock:
                self._ready = True
                backlog, self._backlog = self._backlog, []
                scheduled = [self._schedule(request_id, url) for request_id, url in backlog]
            for request_id, future in scheduled:
                self._watch(request_id, future)
            self.status_update.emit("Fetch worker ready")

            await self._stopping.wait()

            with self._lock:
                self._ready = False
                pending = list(self._in_flight.values())
                self._in_flight.clear()
            for future in pending:
                future.cancel()
            # Let the cancellations land before the session closes
            tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            await asyncio.gather(*tasks, return_exceptions=True)
        self._session = None

    def _schedule(self, request_id: int, url: str) -> Tuple[int, concurrent.futures.Future]:
        # Caller holds self._lock
        future = asyncio.run_coroutine_threadsafe(self._fetch(request_id, url), self._event_loop)
        self._in_flight[request_id] = future
        return request_id, future

    def _watch(self, request_id: int, future: concurrent.futures.Future) -> None:
        # Caller must NOT hold self._lock: a future that is already done runs
        # the callback right here, and _forget takes the lock.
        future.add_done_callback(lambda _f, rid=request_id: self._forget(rid))

    def _forget(self, request_id: int) -> None:
        with self._lock:
            self._in_flight.pop(request_id, None)

    async def _fetch(self, request_id: int, url: str) -> None:
        logger.debug(f"GET {url} (request {request_id})")
        try:
            async with self._session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(response.status)
                body = await response.text(errors="replace")
        except asyncio.CancelledError:
            logger.debug(f"Request {request_id} cancelled")
            raise
        except asyncio.TimeoutError:
            self.failed.emit(request_id, f"timed out after {self.timeout_s:g}s")
            return
        except (aiohttp.ClientError, FetchError) as e:
            self.failed.emit(request_id, str(e) or type(e).__name__)
            return
        self.fetched.emit(request_id, body)

    def submit(self, url: str) -> int:
        """Queue a GET for ``url``; returns the request id used in the signals."""
        scheduled = None
        with self._lock:
            request_id = next(self._ids)
            if self._ready:
                scheduled = self._schedule(request_id, url)
            else:
                self._backlog.append((request_id, url))
        if scheduled is not None:
            self._watch(*scheduled)
        return request_id

    def cancel(self, request_id: int) -> None:
        """Abort a request. A result already queued may still arrive; callers drop unknown ids."""
        with self._lock:
            self._backlog = [(rid, url) for rid, url in self._backlog if rid != request_id]
            future = self._in_flight.pop(request_id, None)
        if future is not None:
            future.cancel()

    def stop(self):
        """Stop the worker; in-flight requests are cancelled."""
        logger.info("Stopping fetch worker...")
        self._stop_requested = True
        if self._event_loop is not None and self._stopping is not None:
            self._event_loop.call_soon_threadsafe(self._stopping.set)
