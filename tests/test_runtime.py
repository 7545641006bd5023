from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from trackgate.bus import InMemoryBus
from trackgate.models.canonical import CollectorApi, PayloadEnvelope, PayloadSource
from trackgate.runtime import CollectorRuntime

SNOWPLOW_TOPIC = "raw.com.snowplowanalytics.snowplow"


def make_envelope(index: int) -> PayloadEnvelope:
    return PayloadEnvelope(
        api=CollectorApi(vendor="com.snowplowanalytics.snowplow", version="tp2"),
        querystring=(("e", "pv"), ("eid", str(index))),
        source=PayloadSource(name="test-collector"),
    )


def test_summary_counts_topics_without_keeping_every_event() -> None:
    sink = InMemoryBus(retain=5)
    runtime = CollectorRuntime(sink=sink)

    for index in range(20):
        runtime.ingest(make_envelope(index))

    summary = runtime.summary()
    assert summary["topics"] == {SNOWPLOW_TOPIC: 20}
    assert summary["accepted_payloads"] == 20
    assert summary["raw_events"] == 20
    assert [event.parameters["eid"] for event in sink.recent(SNOWPLOW_TOPIC)] == ["15", "16", "17", "18", "19"]
    assert not hasattr(runtime, "snapshot_bus")


def test_rejected_payloads_are_counted_but_not_routed() -> None:
    runtime = CollectorRuntime(sink=InMemoryBus())

    runtime.ingest(
        PayloadEnvelope(
            api=CollectorApi(vendor="com.callrail", version="v1"),
            source=PayloadSource(name="test-collector"),
        )
    )

    summary = runtime.summary()
    assert summary["rejected_payloads"] == 1
    assert summary["topics"] == {}


def test_summary_is_consistent_under_concurrent_ingest() -> None:
    runtime = CollectorRuntime(sink=InMemoryBus(retain=1))

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(runtime.ingest, (make_envelope(index) for index in range(200))))
        summaries = list(pool.map(lambda _: runtime.summary(), range(50)))

    assert runtime.summary()["topics"] == {SNOWPLOW_TOPIC: 200}
    assert all(summary["topics"].get(SNOWPLOW_TOPIC, 0) <= 200 for summary in summaries)


def test_close_closes_the_sink() -> None:
    class RecordingSink:
        closed = False

        def publish_many(self, events) -> None:
            list(events)

        def close(self) -> None:
            self.closed = True

    sink = RecordingSink()
    CollectorRuntime(sink=sink).close()

    assert sink.closed is True
