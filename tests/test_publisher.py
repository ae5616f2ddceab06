"""Tests for the dedup cache and status publisher."""

import json
import threading

from lgtv2mqtt.publisher import DedupPublishCache, StatusPublisher


def test_first_publish_goes_through(cache: DedupPublishCache, published: list) -> None:
    """Test that an unseen topic is always published."""
    assert cache.attempt_publish("lgtv/status/volume", "12") is True
    assert published == [("lgtv/status/volume", "12")]


def test_repeated_payload_suppressed(cache: DedupPublishCache, published: list) -> None:
    """Test that only changes reach the bus."""
    sequence = ["1", "1", "2", "2", "2", "1", "1"]
    results = [cache.attempt_publish("lgtv/connected", payload) for payload in sequence]

    assert results == [True, False, True, False, False, True, False]
    assert [payload for _, payload in published] == ["1", "2", "1"]


def test_topics_tracked_independently(cache: DedupPublishCache, published: list) -> None:
    """Test that the same payload on two topics is published on both."""
    assert cache.attempt_publish("lgtv/status/volume", "5")
    assert cache.attempt_publish("lgtv/status/mute", "5")
    assert len(published) == 2
    assert len(cache) == 2


def test_cache_key_is_normalized(cache: DedupPublishCache, published: list) -> None:
    """Test that topics differing only in case share a cache entry."""
    assert cache.attempt_publish("lgtv/status/foregroundApp", "netflix")
    assert not cache.attempt_publish("lgtv/status/foregroundapp", "netflix")
    assert published == [("lgtv/status/foregroundApp", "netflix")]


def test_reset_forgets_values(cache: DedupPublishCache, published: list) -> None:
    """Test that everything is republished after a reset."""
    cache.attempt_publish("status/lgtv2mqtt", "1")
    cache.reset()

    assert len(cache) == 0
    assert cache.attempt_publish("status/lgtv2mqtt", "1")
    assert published == [("status/lgtv2mqtt", "1")] * 2


def test_concurrent_publishes_deduplicated() -> None:
    """Test that racing threads publish a value only once."""
    published = []
    cache = DedupPublishCache(lambda topic, payload: published.append(payload))
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(100):
            cache.attempt_publish("lgtv/connected", "1")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert published == ["1"]


def test_status_publisher_connected(publisher: StatusPublisher, published: list) -> None:
    """Test TV connectivity messages."""
    publisher.connected(True)
    publisher.connected(True)
    publisher.connected(False)

    assert published == [("lgtv/connected", "1"), ("lgtv/connected", "0")]


def test_status_publisher_scalar(publisher: StatusPublisher, published: list) -> None:
    """Test that scalars are published as text."""
    publisher.status("volume", 12)
    publisher.status("foregroundApp", None)

    assert published == [
        ("lgtv/status/volume", "12"),
        ("lgtv/status/foregroundApp", "None"),
    ]


def test_status_publisher_json(publisher: StatusPublisher, published: list) -> None:
    """Test that structured values are published as JSON."""
    channel = {"val": "7-1", "lgtv": {"channelNumber": "7-1", "channelName": "ABC"}}
    assert publisher.status("currentChannel", channel)
    assert not publisher.status("currentChannel", dict(channel))

    topic, payload = published[0]
    assert topic == "lgtv/status/currentChannel"
    assert json.loads(payload) == channel


def test_len_waits_for_lock(cache: DedupPublishCache) -> None:
    """Test that the size is read under the cache lock."""
    cache.attempt_publish("lgtv/connected", "1")
    sizes = []
    reader = threading.Thread(target=lambda: sizes.append(len(cache)))

    with cache._lock:
        reader.start()
        reader.join(timeout=0.2)
        assert reader.is_alive()
        assert sizes == []

    reader.join()
    assert sizes == [1]
