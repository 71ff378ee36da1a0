"""
Codec for the v0.4 trace intake payload.

A payload is a msgpack array of traces, each trace being an array of span maps::

    [[{"name": "web.request", "service": "web", "span_id": 1, ...}, ...], ...]

Decoding follows the tolerance of the reference agent decoder: unknown keys are skipped,
missing keys and ``nil`` values produce the field zero value, and every present value must
have the expected msgpack type.
"""
from typing import Any
from typing import Callable
from typing import Dict
from typing import List

import msgpack

from ddmock.constants import MAX_INT_32BITS
from ddmock.constants import MAX_UINT_64BITS
from ddmock.constants import MIN_INT_32BITS
from ddmock.span import Batch
from ddmock.span import Span
from ddmock.span import Trace


__all__ = ["DecodeError", "decode_batch", "encode_batch"]


class DecodeError(ValueError):
    """Raised when a payload does not match the trace intake schema."""


def _as_str(value, field):
    # type: (Any, str) -> str
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError("invalid type for %r: expected str, got %s" % (field, type(value).__name__))
    return value


def _as_int(value, field, lower, upper):
    # type: (Any, str, int, int) -> int
    if value is None:
        return 0
    # bool is an int subclass but msgpack booleans are a distinct wire type
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError("invalid type for %r: expected int, got %s" % (field, type(value).__name__))
    if not lower <= value <= upper:
        raise DecodeError("value out of range for %r: %d" % (field, value))
    return value


def _as_int64(value, field):
    # type: (Any, str) -> int
    return _as_int(value, field, -(1 << 63), (1 << 63) - 1)


def _as_uint64(value, field):
    # type: (Any, str) -> int
    return _as_int(value, field, 0, MAX_UINT_64BITS)


def _as_int32(value, field):
    # type: (Any, str) -> int
    return _as_int(value, field, MIN_INT_32BITS, MAX_INT_32BITS)


def _as_meta(value, field):
    # type: (Any, str) -> Dict[str, str]
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError("invalid type for %r: expected map, got %s" % (field, type(value).__name__))
    return {_as_str(k, field + " key"): _as_str(v, "%s[%r]" % (field, k)) for k, v in value.items()}


def _as_metrics(value, field):
    # type: (Any, str) -> Dict[str, float]
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError("invalid type for %r: expected map, got %s" % (field, type(value).__name__))
    metrics = {}
    for k, v in value.items():
        key = _as_str(k, field + " key")
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise DecodeError("invalid type for %s[%r]: expected number, got %s" % (field, key, type(v).__name__))
        metrics[key] = float(v)
    return metrics


_SPAN_FIELDS = {
    "name": _as_str,
    "service": _as_str,
    "resource": _as_str,
    "type": _as_str,
    "start": _as_int64,
    "duration": _as_int64,
    "meta": _as_meta,
    "metrics": _as_metrics,
    "span_id": _as_uint64,
    "trace_id": _as_uint64,
    "parent_id": _as_uint64,
    "error": _as_int32,
}  # type: Dict[str, Callable[[Any, str], Any]]


def _decode_span(obj):
    # type: (Any) -> Span
    if not isinstance(obj, dict):
        raise DecodeError("invalid span: expected map, got %s" % type(obj).__name__)
    fields = {}
    for key, value in obj.items():
        convert = _SPAN_FIELDS.get(key)
        if convert is None:
            # unknown keys are skipped
            continue
        fields[key] = convert(value, key)
    return Span(**fields)


def _decode_trace(obj):
    # type: (Any) -> Trace
    if not isinstance(obj, list):
        raise DecodeError("invalid trace: expected array, got %s" % type(obj).__name__)
    return [_decode_span(span) for span in obj]


def decode_batch(data):
    # type: (bytes) -> Batch
    """Decode a v0.4 trace intake payload.

    :param data: The raw request body
    :returns: The list of traces contained in the payload, in order
    :raises DecodeError: if the payload is not valid msgpack or does not match the schema
    """
    try:
        obj = msgpack.unpackb(data, raw=False, use_list=True)
    except (msgpack.exceptions.UnpackException, ValueError, TypeError) as e:
        raise DecodeError("malformed msgpack payload: %s" % e) from e

    if not isinstance(obj, list):
        raise DecodeError("invalid payload: expected array, got %s" % type(obj).__name__)
    return [_decode_trace(trace) for trace in obj]


def _span_to_dict(span):
    # type: (Span) -> Dict[str, Any]
    d = {
        "name": span.name,
        "service": span.service,
        "resource": span.resource,
        "type": span.type,
        "start": span.start,
        "duration": span.duration,
    }  # type: Dict[str, Any]
    if span.meta:
        d["meta"] = span.meta
    if span.metrics:
        d["metrics"] = span.metrics
    d["span_id"] = span.span_id
    d["trace_id"] = span.trace_id
    d["parent_id"] = span.parent_id
    d["error"] = span.error
    return d


def encode_batch(batch):
    # type: (List[List[Span]]) -> bytes
    """Encode traces into a v0.4 trace intake payload."""
    return msgpack.packb([[_span_to_dict(span) for span in trace] for trace in batch], use_bin_type=True)
