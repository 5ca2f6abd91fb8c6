import logging
import threading

import pytest

from cborjson.exceptions import (
    DeserializationError,
    ExceptionContext,
    SerializationError,
    SerializerError,
    current_context,
    current_depth,
)


def test_root_element_message():
    err = SerializerError("boom")
    assert err.message() == "boom"
    assert err.property_trace() == []
    assert str(err) == "what: boom\nProperty Trace: <root element>"


def test_serialization_prefix():
    err = SerializationError("QIODevice must be open and writable!")
    assert err.message() == "Failed to serialize with error: QIODevice must be open and writable!"
    assert isinstance(err, SerializerError)


def test_deserialization_prefix():
    err = DeserializationError("QIODevice must be open and readable!")
    assert err.message() == "Failed to deserialize with error: QIODevice must be open and readable!"


def test_trace_recorded_inside_contexts():
    with ExceptionContext("outer", "Outer"):
        with ExceptionContext("inner", "int"):
            err = DeserializationError("bad")
    assert err.property_trace() == [("outer", "Outer"), ("inner", "int")]
    assert str(err).endswith("\n\touter (Type: Outer)\n\tinner (Type: int)")
    assert str(err).startswith("what: Failed to deserialize with error: bad\nProperty Trace:")


def test_depth_and_pop():
    start = current_depth()
    with ExceptionContext("a", "A"):
        assert current_depth() == start + 1
        with ExceptionContext("b", "B"):
            assert current_depth() == start + 2
            assert current_context()[-2:] == [("a", "A"), ("b", "B")]
        assert current_depth() == start + 1
    assert current_depth() == start


def test_context_popped_on_error():
    start = current_depth()
    with pytest.raises(SerializationError):
        with ExceptionContext("p", "T"):
            raise SerializationError("x")
    assert current_depth() == start


def test_unnamed_hint():
    with ExceptionContext(None, "QString"):
        assert current_context()[-1] == ("<unnamed>", "QString")


def test_trace_is_copy():
    with ExceptionContext("p", "T"):
        err = SerializerError("m")
        snapshot = current_context()
    snapshot.append(("x", "y"))
    assert err.property_trace() == [("p", "T")]
    assert current_depth() == 0


def test_thread_isolation():
    seen = []

    def worker():
        seen.append(current_depth())

    with ExceptionContext("main", "T"):
        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert current_depth() == 1
    assert seen == [0]


def test_corrupted_store_warns(caplog):
    ctx = ExceptionContext("p", "T")
    with caplog.at_level(logging.WARNING, logger="cborjson.exceptioncontext"):
        ctx.__exit__(None, None, None)
    assert "Corrupted context store" in caplog.text
    assert current_depth() == 0