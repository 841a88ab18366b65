"""Serialised delivery of tickets to a printer.

A :class:`PrintQueue` owns a single worker task that drains an
``asyncio.Queue`` and hands each ticket to a dispatcher once, so two tickets
are never interleaved on the same device. Dispatcher failures are logged and
counted; the worker keeps going.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from ..routes_metrics import print_jobs_total

logger = logging.getLogger(__name__)


class PrintDispatcher(Protocol):
    async def send(self, data: bytes) -> None:
        ...


class SocketPrinter:
    """Write raw ESC/POS bytes to a network printer (JetDirect, port 9100)."""

    def __init__(self, host: str, port: int = 9100, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    async def send(self, data: bytes) -> None:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(self.host, self.port), self.timeout
        )
        try:
            writer.write(data)
            await asyncio.wait_for(writer.drain(), self.timeout)
        finally:
            writer.close()
            await writer.wait_closed()


@dataclass(frozen=True)
class PrintJob:
    label: str
    data: bytes


class PrintQueue:
    def __init__(self, dispatcher: PrintDispatcher, maxsize: int = 100) -> None:
        self.dispatcher = dispatcher
        self._queue: asyncio.Queue[PrintJob] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="print-queue")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    def submit(self, label: str, data: bytes) -> int:
        """Queue a ticket and return the number of jobs waiting.

        Raises ``asyncio.QueueFull`` when the printer is too far behind.
        """

        self._queue.put_nowait(PrintJob(label, data))
        return self._queue.qsize()

    async def join(self) -> None:
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.dispatcher.send(job.data)
            except Exception:
                print_jobs_total.labels(result="error").inc()
                logger.exception("print job failed label=%s", job.label)
            else:
                print_jobs_total.labels(result="ok").inc()
                logger.info("print job sent label=%s bytes=%d", job.label, len(job.data))
            finally:
                self._queue.task_done()
