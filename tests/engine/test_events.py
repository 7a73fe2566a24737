"""Tests for src/engine/events.py - event types and payloads."""

from src.engine.events import EventPayload, GameEvent


# ── GameEvent enum ──────────────────────────────────────────────────────

class TestGameEvent:
    def test_round_lifecycle_events_defined(self):
        names = {e.name for e in GameEvent}
        assert {
            "ROUND_STARTED", "GUESS_MADE", "GUESS_REJECTED", "ROUND_WON",
            "ROUND_LOST", "ROUND_QUIT", "ROUND_PAUSED", "ROUND_RESUMED",
        } <= names

    def test_events_are_unique(self):
        values = [e.value for e in GameEvent]
        assert len(values) == len(set(values))


# ── EventPayload ────────────────────────────────────────────────────────

class TestEventPayload:
    def test_minimal_payload(self):
        p = EventPayload(event=GameEvent.TIME_UP)
        assert p.round_id is None
        assert p.data == {}

    def test_full_payload(self):
        p = EventPayload(
            event=GameEvent.GUESS_MADE,
            round_id=4,
            data={"letter": "a", "correct": True},
        )
        assert p.round_id == 4
        assert p.data["letter"] == "a"

    def test_data_not_shared(self):
        a = EventPayload(event=GameEvent.HINT_USED)
        b = EventPayload(event=GameEvent.HINT_USED)
        a.data["x"] = 1
        assert b.data == {}
