"""
Cross-process mutual exclusion via a lock marker file.

The marker (<resource>.lock) is created with O_CREAT | O_EXCL, which fails
if it already exists, on any local filesystem and for any process sharing
the path. Removing it releases the gate. Each marker carries a token
unique to the acquisition, and a holder only removes a marker that still
carries its own token.

Acquisition is bounded: after `retries` failed attempts the critical
section runs WITHOUT exclusivity and a warning is logged. Callers never hang
forever, at the cost that sustained contention can issue a number twice.
A holder that crashes leaves its marker behind; set `stale_after_seconds`
to have such markers removed, otherwise every caller pays the full retry
budget until the marker is deleted by hand.
"""

import os
import time
import logging
from contextlib import contextmanager, suppress
from uuid import uuid4
from typing import Callable, Iterator, TypeVar

from core.exceptions import CounterWriteError

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOCK_SUFFIX = ".lock"


class FileGate:
    """
    Serializes work on a resource path across threads and processes.

    Usage:
        gate = FileGate(retries=50, delay_seconds=0.02)
        value = gate.run_exclusive(".seq.json", lambda: bump_counter())
    """

    def __init__(
        self,
        retries: int = 50,
        delay_seconds: float = 0.02,
        stale_after_seconds: float | None = None,
    ):
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self.retries = retries
        self.delay_seconds = delay_seconds
        self.stale_after_seconds = stale_after_seconds

    @staticmethod
    def marker_path(resource_id: str) -> str:
        """Path of the lock marker for a resource."""
        return f"{resource_id}{LOCK_SUFFIX}"

    def run_exclusive(self, resource_id: str, fn: Callable[[], T]) -> T:
        """
        Run fn while holding the gate for resource_id.

        The marker is removed whether fn returns or raises. If the gate cannot
        be acquired within the retry budget, fn runs anyway.
        """
        with self.hold(resource_id):
            return fn()

    @contextmanager
    def hold(self, resource_id: str) -> Iterator[bool]:
        """
        Context manager form of run_exclusive.

        Yields True if the gate was acquired, False if the body runs
        unprotected after retries ran out.
        """
        marker = self.marker_path(resource_id)
        token = self._acquire(marker)
        try:
            yield token is not None
        finally:
            if token is not None:
                self._release(marker, token)

    def _acquire(self, marker: str) -> str | None:
        """Create the marker; returns its ownership token, or None on fallback."""
        parent = os.path.dirname(os.path.abspath(marker))
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as e:
            raise CounterWriteError(marker, f"cannot create directory: {e}") from e

        token = f"{os.getpid()}-{uuid4().hex}"
        for attempt in range(self.retries):
            try:
                fd = os.open(marker, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                if self._clear_if_stale(marker):
                    continue
                time.sleep(self.delay_seconds)
                continue
            except OSError as e:
                raise CounterWriteError(marker, f"cannot create lock marker: {e}") from e

            try:
                os.write(fd, token.encode("ascii"))
            finally:
                os.close(fd)
            if attempt:
                logger.debug(f"Acquired {marker} after {attempt} retries")
            return token

        logger.warning(
            f"Could not acquire {marker} after {self.retries} attempts; "
            f"proceeding without exclusive access"
        )
        return None

    def _release(self, marker: str, token: str) -> None:
        """Remove the marker only if it still carries our token."""
        if _read_token(marker) != token:
            logger.warning(f"Lock marker {marker} was taken over while held; leaving it in place")
            return
        with suppress(FileNotFoundError):
            os.unlink(marker)

    def _clear_if_stale(self, marker: str) -> bool:
        """
        Remove the marker if expiry is enabled and it is older than the threshold.

        The marker is first renamed aside, so only the file that was actually
        inspected gets deleted. A marker that turns out to be fresh once
        renamed is put back unless a new one has appeared in the meantime.
        """
        if self.stale_after_seconds is None:
            return False
        try:
            age = time.time() - os.path.getmtime(marker)
        except FileNotFoundError:
            # Released between our open() and stat(); retry immediately
            return True
        if age < self.stale_after_seconds:
            return False

        aside = f"{marker}.{uuid4().hex}.stale"
        try:
            os.rename(marker, aside)
        except FileNotFoundError:
            return True
        try:
            age = time.time() - os.path.getmtime(aside)
            if age < self.stale_after_seconds:
                # Replaced by a live holder after our first check
                with suppress(OSError):
                    os.link(aside, marker)
                return False
            logger.warning(f"Removing stale lock marker {marker} (age {age:.1f}s)")
            return True
        finally:
            with suppress(FileNotFoundError):
                os.unlink(aside)


def _read_token(marker: str) -> str | None:
    try:
        with open(marker, "r", encoding="ascii") as f:
            return f.read()
    except (FileNotFoundError, UnicodeDecodeError):
        return None
