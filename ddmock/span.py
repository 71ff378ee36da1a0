from typing import Dict
from typing import List

import attr


@attr.s(frozen=True, slots=True)
class Span(object):
    """A single span as received by the mock agent.

    Field names match the keys of the v0.4 trace intake payload. ``parent_id`` is ``0`` for
    root spans and ``error`` is nonzero when the span is errored.
    """

    name = attr.ib(type=str, default="")
    service = attr.ib(type=str, default="")
    resource = attr.ib(type=str, default="")
    type = attr.ib(type=str, default="")
    start = attr.ib(type=int, default=0)
    duration = attr.ib(type=int, default=0)
    meta = attr.ib(type=Dict[str, str], factory=dict)
    metrics = attr.ib(type=Dict[str, float], factory=dict)
    span_id = attr.ib(type=int, default=0)
    trace_id = attr.ib(type=int, default=0)
    parent_id = attr.ib(type=int, default=0)
    error = attr.ib(type=int, default=0)

    @property
    def is_root(self):
        # type: () -> bool
        return self.parent_id == 0


# A trace is the list of spans sent together for one trace id
Trace = List[Span]

# A batch is the list of traces decoded from a single intake request
Batch = List[Trace]
