"""Tests for the background enhancement scheduler."""

import json
import threading
import pytest

from inboxparser.engine.pipeline import CapturePipeline, ParserConfig
from inboxparser.engine.scheduler import EnhancementScheduler, SchedulerStoppedError
from inboxparser.models.enums import ParsingMethod

from tests.conftest import FakeLLMClient


RESPONSE = json.dumps({
    "what": {"value": "Pay rent", "confidence": 0.9},
    "aspect": {"value": "financial", "confidence": 0.9},
})


@pytest.fixture
def scheduler():
    scheduler = EnhancementScheduler(ParserConfig())
    scheduler.start()
    yield scheduler
    scheduler.stop()


class TestEnhancementScheduler:
    """Test lifecycle and delivery."""

    def test_start_and_stop(self):
        scheduler = EnhancementScheduler()
        assert scheduler.running is False
        scheduler.start()
        scheduler.start()
        assert scheduler.running is True
        scheduler.stop()
        assert scheduler.running is False
        scheduler.stop()

    def test_callback_receives_enhanced_result(self, scheduler, today):
        pipeline = CapturePipeline(llm_client=FakeLLMClient(response=RESPONSE), config=ParserConfig())
        prior = pipeline.parse("asdkjasd", today)
        delivered = []
        done = threading.Event()

        def on_enhanced(result):
            delivered.append(result)
            done.set()

        future = scheduler.submit(pipeline, "asdkjasd", prior, on_enhanced, today)
        future.result(timeout=5)

        assert done.is_set()
        assert delivered[0].parsing_method == ParsingMethod.HYBRID
        assert delivered[0].what.value == "Pay rent"

    def test_no_callback_when_service_unreachable(self, scheduler, today):
        pipeline = CapturePipeline(llm_client=FakeLLMClient(response=RESPONSE, connected=False), config=ParserConfig())
        delivered = []
        future = scheduler.submit(pipeline, "asdkjasd", pipeline.parse("asdkjasd", today), delivered.append, today)
        future.result(timeout=5)
        assert delivered == []

    def test_failing_callback_does_not_break_scheduler(self, scheduler, today):
        pipeline = CapturePipeline(llm_client=FakeLLMClient(response=RESPONSE), config=ParserConfig())
        prior = pipeline.parse("asdkjasd", today)

        def explode(result):
            raise RuntimeError("client went away")

        failed = scheduler.submit(pipeline, "asdkjasd", prior, explode, today)
        with pytest.raises(RuntimeError):
            failed.result(timeout=5)

        delivered = []
        scheduler.submit(pipeline, "asdkjasd", prior, delivered.append, today).result(timeout=5)
        assert len(delivered) == 1

    def test_disabled_returns_none(self, today):
        scheduler = EnhancementScheduler(ParserConfig(enable_llm=False))
        pipeline = CapturePipeline(llm_client=FakeLLMClient(response=RESPONSE), config=ParserConfig())
        assert scheduler.submit(pipeline, "asdkjasd", pipeline.parse("asdkjasd", today), lambda r: None) is None

    def test_submit_when_stopped_raises(self, today):
        scheduler = EnhancementScheduler(ParserConfig())
        pipeline = CapturePipeline(llm_client=FakeLLMClient(response=RESPONSE), config=ParserConfig())
        with pytest.raises(SchedulerStoppedError):
            scheduler.submit(pipeline, "asdkjasd", pipeline.parse("asdkjasd", today), lambda r: None)
