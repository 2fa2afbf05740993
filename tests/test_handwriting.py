"""Tests for notes_export.handwriting — HandwritingRecognitionClient."""

import asyncio

from notes_export.handwriting import HandwritingRecognitionClient, strokes_to_ink
from notes_export.models import ABSENT, Stroke, StrokePoint
from notes_export.providers.base import InkPoint

from conftest import FakeInkRecognizer, make_stroke


def _recognize(client, strokes):
    return asyncio.run(client.recognize(strokes))


class TestStrokesToInk:
    def test_times_become_integer_milliseconds(self):
        stroke = Stroke(points=(StrokePoint(1, 2, 0.0), StrokePoint(3, 4, 0.0255)))
        ink = strokes_to_ink([stroke])
        assert ink.strokes[0].points == (InkPoint(1.0, 2.0, 0), InkPoint(3.0, 4.0, 25))

    def test_stroke_order_preserved(self):
        a, b = make_stroke(y=10), make_stroke(y=20)
        ink = strokes_to_ink([a, b])
        assert [s.points[0].y for s in ink.strokes] == [10.0, 20.0]


class TestRecognize:
    def test_empty_input_is_absent_without_any_call(self, ink_recognizer):
        client = HandwritingRecognitionClient(ink_recognizer)
        assert _recognize(client, []) is ABSENT
        assert ink_recognizer.provision_calls == []
        assert ink_recognizer.recognized == []

    def test_top_candidate_is_returned(self):
        backend = FakeInkRecognizer(candidates=["best guess", "second"])
        result = _recognize(HandwritingRecognitionClient(backend), [make_stroke()])
        assert result.text == "best guess"

    def test_candidate_text_is_cleaned(self):
        backend = FakeInkRecognizer(candidates=["  hello \n\n\n world  "])
        result = _recognize(HandwritingRecognitionClient(backend), [make_stroke()])
        assert result.text == "hello\n\n world"

    def test_no_candidates_is_absent(self):
        backend = FakeInkRecognizer(candidates=[])
        assert _recognize(HandwritingRecognitionClient(backend), [make_stroke()]) is ABSENT

    def test_blank_candidate_is_absent(self):
        backend = FakeInkRecognizer(candidates=["   "])
        assert _recognize(HandwritingRecognitionClient(backend), [make_stroke()]) is ABSENT

    def test_recognizer_fault_is_absent(self):
        backend = FakeInkRecognizer(error=RuntimeError("boom"))
        assert _recognize(HandwritingRecognitionClient(backend), [make_stroke()]) is ABSENT

    def test_provisioning_failure_is_absent_without_recognizing(self):
        backend = FakeInkRecognizer(fail_provision=True)
        assert _recognize(HandwritingRecognitionClient(backend), [make_stroke()]) is ABSENT
        assert backend.recognized == []


class TestProvisioning:
    def test_language_passed_to_backend(self, ink_recognizer):
        client = HandwritingRecognitionClient(ink_recognizer, language="de-DE")
        _recognize(client, [make_stroke()])
        assert ink_recognizer.provision_calls == ["de-DE"]

    def test_provisioned_once_across_concurrent_calls(self, ink_recognizer):
        client = HandwritingRecognitionClient(ink_recognizer)

        async def many():
            return await asyncio.gather(*(client.recognize([make_stroke()]) for _ in range(5)))

        results = asyncio.run(many())
        assert [r.text for r in results] == ["hello world"] * 5
        assert ink_recognizer.provision_calls == ["en-US"]

    def test_failed_provisioning_is_not_retried(self):
        backend = FakeInkRecognizer(fail_provision=True)
        client = HandwritingRecognitionClient(backend)

        async def twice():
            await client.recognize([make_stroke()])
            await client.recognize([make_stroke()])

        asyncio.run(twice())
        assert backend.provision_calls == ["en-US"]
