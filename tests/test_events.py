"""Tests for the event emitter."""

from benchly.events import Event, EventEmitter


def test_emit_calls_listeners_in_order():
    """Test listeners run in registration order with the event and extra args."""
    emitter = EventEmitter()
    calls = []
    emitter.on("cycle", lambda event, extra: calls.append(("first", event.type, extra)))
    emitter.on("cycle", lambda event, extra: calls.append(("second", event.type, extra)))

    emitter.emit("cycle", 42)

    assert calls == [("first", "cycle", 42), ("second", "cycle", 42)]


def test_on_accepts_space_separated_types():
    """Test one listener can be registered for several types at once."""
    emitter = EventEmitter()
    seen = []
    emitter.on("start complete", lambda event: seen.append(event.type))

    emitter.emit("start")
    emitter.emit("complete")
    emitter.emit("cycle")

    assert seen == ["start", "complete"]


def test_emit_fills_targets():
    """Test target and current_target default to the emitter."""
    emitter = EventEmitter()
    captured = []
    emitter.on("start", captured.append)

    emitter.emit("start")
    other = object()
    emitter.emit(Event("start", target=other))

    assert captured[0].target is emitter
    assert captured[0].current_target is emitter
    assert captured[1].target is other
    assert captured[1].current_target is emitter


def test_returning_false_cancels():
    """Test a listener returning False marks the event cancelled."""
    emitter = EventEmitter()
    emitter.on("reset", lambda event: False)
    emitter.on("reset", lambda event: None)

    event = Event("reset")
    emitter.emit(event)

    assert event.cancelled
    # Falsy values other than False do not cancel
    other = EventEmitter()
    other.on("reset", lambda event: 0)
    second = Event("reset")
    other.emit(second)
    assert not second.cancelled


def test_aborted_stops_remaining_listeners():
    """Test setting event.aborted skips the listeners after it."""
    emitter = EventEmitter()
    calls = []

    def stop(event):
        calls.append("stop")
        event.aborted = True

    emitter.on("cycle", stop)
    emitter.on("cycle", lambda event: calls.append("late"))

    emitter.emit("cycle")

    assert calls == ["stop"]


def test_emit_returns_last_result():
    """Test emit returns the return value of the last listener called."""
    emitter = EventEmitter()
    emitter.on("cycle", lambda event: "a")
    emitter.on("cycle", lambda event: "b")

    assert emitter.emit("cycle") == "b"
    assert emitter.emit("unknown") is None


def test_off_variants():
    """Test removing one listener, a type, and everything."""
    emitter = EventEmitter()
    calls = []

    def a(event):
        calls.append("a")

    def b(event):
        calls.append("b")

    emitter.on("cycle start", a)
    emitter.on("cycle", b)

    emitter.off("cycle", a)
    emitter.emit("cycle")
    assert calls == ["b"]

    emitter.off("cycle")
    emitter.emit("cycle")
    assert calls == ["b"]

    emitter.off()
    emitter.emit("start")
    assert calls == ["b"]


def test_listeners_is_live():
    """Test the listeners list can be mutated to change dispatch."""
    emitter = EventEmitter()
    calls = []
    emitter.on("complete", lambda event: calls.append("own"))

    emitter.listeners("complete").insert(0, lambda event: calls.append("first"))
    emitter.emit("complete")

    assert calls == ["first", "own"]


def test_listener_added_during_emit_runs_next_time():
    """Test dispatch iterates over a snapshot of the listeners."""
    emitter = EventEmitter()
    calls = []

    def register(event):
        calls.append("register")
        emitter.on("cycle", lambda event: calls.append("added"))

    emitter.on("cycle", register)
    emitter.emit("cycle")
    assert calls == ["register"]


def test_event_create_and_extra_attributes():
    """Test Event.create normalizes strings, dicts and events."""
    event = Event("error", message="boom")
    assert Event.create(event) is event
    assert event.message == "boom"

    from_dict = Event.create({"type": "add", "target": "x"})
    assert from_dict.type == "add"
    assert from_dict.target == "x"
    assert not from_dict.cancelled
    assert not from_dict.aborted

    assert Event.create("start").type == "start"
    assert "start" in repr(Event("start"))
