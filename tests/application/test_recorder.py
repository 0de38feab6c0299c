# tests/application/test_recorder.py
import pytest

from application.events import Event
from application.ports.http_client import HttpRequest
from application.recorder import Recorder
from domain.exceptions import HandlerFailure


def _req(path: str) -> HttpRequest:
    return HttpRequest(method="GET", url=f"http://example.com{path}")


class TestRecorder:
    def test_not_recording_until_started(self):
        recorder = Recorder()
        recorder.on_post_request(_req("/a"))

        assert recorder.recording is False
        assert len(recorder) == 0

    def test_records_in_order_while_started(self):
        recorder = Recorder()
        recorder.start()
        recorder.on_post_request(_req("/a"))
        recorder.on_post_request(_req("/b"))
        recorder.stop()
        recorder.on_post_request(_req("/c"))

        entries = recorder.entries
        assert [e.request.url for e in entries] == ["http://example.com/a", "http://example.com/b"]
        assert [e.seq for e in entries] == [1, 2]
        assert entries[0].timestamp <= entries[1].timestamp

    def test_start_and_stop_emit_events(self):
        recorder = Recorder()
        seen = []
        recorder.on(Event.RECORD_START, lambda e, s, p: seen.append((e, s, p)))
        recorder.on(Event.RECORD_STOP, lambda e, s, p: seen.append((e, s, p)))

        recorder.start()
        recorder.stop()

        assert seen == [(Event.RECORD_START, recorder, None), (Event.RECORD_STOP, recorder, None)]

    def test_replay_emits_each_request_in_order(self):
        recorder = Recorder()
        recorder.start()
        for p in ("/a", "/b", "/c"):
            recorder.on_post_request(_req(p))
        replayed = []
        recorder.on(Event.RECORD_REPLAY, lambda e, s, req: replayed.append(req.url))

        count = recorder.replay()

        assert count == 3
        assert replayed == ["http://example.com/a", "http://example.com/b", "http://example.com/c"]

    def test_replay_fails_fast(self):
        recorder = Recorder()
        recorder.start()
        for p in ("/a", "/b", "/c"):
            recorder.on_post_request(_req(p))
        replayed = []

        def handler(e, s, req):
            if req.url.endswith("/b"):
                raise HandlerFailure("boom")
            replayed.append(req.url)

        recorder.on(Event.RECORD_REPLAY, handler)

        with pytest.raises(HandlerFailure):
            recorder.replay()
        assert replayed == ["http://example.com/a"]
        assert len(recorder) == 3

    def test_requests_seen_during_replay_are_not_recorded(self):
        recorder = Recorder()
        recorder.start()
        recorder.on_post_request(_req("/a"))
        recorder.on(Event.RECORD_REPLAY, lambda e, s, req: recorder.on_post_request(req))

        recorder.replay()

        assert len(recorder) == 1

    def test_max_entries_drops_oldest(self):
        recorder = Recorder(max_entries=2)
        recorder.start()
        for p in ("/a", "/b", "/c"):
            recorder.on_post_request(_req(p))

        assert [r.url for r in recorder.requests()] == ["http://example.com/b", "http://example.com/c"]

    def test_clear(self):
        recorder = Recorder()
        recorder.start()
        recorder.on_post_request(_req("/a"))
        recorder.clear()

        assert recorder.entries == []
