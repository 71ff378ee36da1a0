from contextlib import contextmanager
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional

from ddmock.internal.lock import ReadWriteLock
from ddmock.internal.logger import get_logger
from ddmock.span import Batch
from ddmock.span import Span


log = get_logger(__name__)


class SpanIndexView(object):
    """Unlocked accessors over the index mappings, only valid inside :meth:`SpanIndex.view`."""

    __slots__ = ("_by_id", "_by_name")

    def __init__(self, by_id, by_name):
        # type: (Dict[int, Span], Dict[str, Span]) -> None
        self._by_id = by_id
        self._by_name = by_name

    def lookup(self, name):
        # type: (str) -> Optional[Span]
        return self._by_name.get(name)

    def lookup_by_id(self, span_id):
        # type: (int) -> Optional[Span]
        return self._by_id.get(span_id)

    def names(self):
        # type: () -> List[str]
        return sorted(self._by_name)


class SpanIndex(object):
    """Received spans, indexed by span id and by span name.

    Span names are not unique: the name index only keeps the most recently inserted span
    for a given name, while the id index keeps every span. Tests relying on name lookups
    must not reuse span names.

    A batch is applied under the write side of the lock so readers either see all of its
    spans or none of them.
    """

    def __init__(self):
        # type: () -> None
        self._lock = ReadWriteLock()
        self._by_id = {}  # type: Dict[int, Span]
        self._by_name = {}  # type: Dict[str, Span]

    def __len__(self):
        # type: () -> int
        with self._lock.read_locked():
            return len(self._by_id)

    def insert_batch(self, batch):
        # type: (Batch) -> None
        count = 0
        with self._lock.write_locked():
            for trace in batch:
                for span in trace:
                    self._by_id[span.span_id] = span
                    self._by_name[span.name] = span
                    count += 1
        log.debug("indexed %d spans from %d traces", count, len(batch))

    def lookup(self, name):
        # type: (str) -> Optional[Span]
        with self._lock.read_locked():
            return self._by_name.get(name)

    def lookup_by_id(self, span_id):
        # type: (int) -> Optional[Span]
        with self._lock.read_locked():
            return self._by_id.get(span_id)

    def names(self):
        # type: () -> List[str]
        with self._lock.read_locked():
            return sorted(self._by_name)

    @contextmanager
    def view(self):
        # type: () -> Iterator[SpanIndexView]
        """Hold the read side of the lock across several lookups."""
        with self._lock.read_locked():
            yield SpanIndexView(self._by_id, self._by_name)

    def reset(self):
        # type: () -> None
        with self._lock.write_locked():
            self._by_id = {}
            self._by_name = {}

    @property
    def generation(self):
        # type: () -> int
        """Number of mutations applied so far."""
        return self._lock.generation

    def wait_for_update(self, generation, timeout):
        # type: (int, float) -> bool
        return self._lock.wait_for_write(generation, timeout)
