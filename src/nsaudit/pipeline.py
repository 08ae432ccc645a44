from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Iterable, List, Optional, Tuple

from .auditor import DomainAuditor
from .compare import Comparator
from .errors import ConfigError
from .models import AuditStats, Comparison, DomainAuditResult, normalize_host

logger = logging.getLogger(__name__)

Item = Tuple[DomainAuditResult, Comparison]
Sink = Callable[[DomainAuditResult, Comparison], None]

# Marks the end of a queue. Workers and the consumer stop only on this,
# never on an empty read.
_CLOSED = object()


class AuditPipeline:
    """
    producer -> bounded input queue -> N workers -> bounded output queue -> consumer

    The producer closes the input queue with one sentinel per worker once the
    domain source is exhausted. The output queue is closed only after every
    worker has returned. The calling thread is the consumer.
    """

    def __init__(
        self,
        auditor: DomainAuditor,
        comparator: Comparator,
        workers: int = 4,
        queue_size: int = 4096,
    ) -> None:
        if int(workers) < 1:
            raise ConfigError(f"workers must be a positive integer, got {workers!r}")
        if int(queue_size) < 1:
            raise ConfigError(f"queue_size must be a positive integer, got {queue_size!r}")
        self.auditor = auditor
        self.comparator = comparator
        self.workers = int(workers)
        self.queue_size = int(queue_size)

    def run(self, domains: Iterable[str], sink: Optional[Sink] = None) -> AuditStats:
        inbox: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_size)
        outbox: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_size)
        producer_errors: List[BaseException] = []

        producer = threading.Thread(
            target=self._produce, args=(domains, inbox, producer_errors), name="nsaudit-producer", daemon=True
        )
        workers = [
            threading.Thread(target=self._work, args=(i, inbox, outbox), name=f"nsaudit-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        closer = threading.Thread(target=self._close_when_done, args=(workers, outbox), name="nsaudit-closer", daemon=True)

        producer.start()
        for w in workers:
            logger.info("Starting worker: %s", w.name)
            w.start()
        closer.start()

        stats = AuditStats()
        closed = False
        try:
            while True:
                item = outbox.get()
                if item is _CLOSED:
                    closed = True
                    break
                result, comparison = item  # type: ignore[misc]
                stats.add(result, comparison)
                if sink is not None:
                    sink(result, comparison)
        finally:
            # A failing sink must not leave workers blocked on a full outbox.
            while not closed:
                closed = outbox.get() is _CLOSED

        producer.join()
        closer.join()

        if producer_errors:
            raise producer_errors[0]
        return stats

    def _produce(self, domains: Iterable[str], inbox: "queue.Queue[object]", errors: List[BaseException]) -> None:
        count = 0
        try:
            for raw in domains:
                d = (raw or "").strip()
                if not d:
                    continue
                inbox.put(d)
                count += 1
        except Exception as e:
            logger.error("Domain source failed after %d domain(s): %s", count, e)
            errors.append(e)
        finally:
            for _ in range(self.workers):
                inbox.put(_CLOSED)
        logger.info("Finished adding %d domain(s) to queue", count)

    def _work(self, index: int, inbox: "queue.Queue[object]", outbox: "queue.Queue[object]") -> None:
        while True:
            domain = inbox.get()
            if domain is _CLOSED:
                break
            outbox.put(self.process(str(domain)))
        logger.debug("Worker %d finished", index)

    def process(self, domain: str) -> Item:
        """Audit and compare one domain. Never raises."""
        try:
            result = self.auditor.audit(domain)
        except Exception as e:
            logger.exception("Unexpected failure auditing %s", domain)
            result = DomainAuditResult.failed(normalize_host(domain), e)
        return result, self.comparator.compare(result)

    @staticmethod
    def _close_when_done(workers: List[threading.Thread], outbox: "queue.Queue[object]") -> None:
        logger.debug("Waiting for workers to finish")
        for w in workers:
            w.join()
        outbox.put(_CLOSED)
