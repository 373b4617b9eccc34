import math

import pytest

from vnbackend.metrics import (
    REQUEST_COUNT,
    REQUEST_DURATION,
    Counter,
    Histogram,
    StatusRecorder,
    record_request,
)


@pytest.fixture
def histogram():
    return Histogram("test_seconds", "test", [0.1, 0.25, 0.5, 1, 2.5], ["handler", "method"])


def test_histogram_count_matches_observations(histogram):
    values = [0.05, 0.3, 3.0, 0.7]
    for value in values:
        histogram.observe(("admin", "POST"), value)
    assert histogram.count(("admin", "POST")) == len(values)
    assert histogram.bucket_counts(("admin", "POST"))[math.inf] == len(values)


def test_histogram_buckets_are_cumulative(histogram):
    for value in [0.05, 0.3, 3.0, 0.7, 0.2]:
        histogram.observe(("chapter", "GET"), value)
    counts = list(histogram.bucket_counts(("chapter", "GET")).values())
    assert counts == sorted(counts)
    assert histogram.bucket_counts(("chapter", "GET"))[0.5] == 3


def test_histogram_labels_are_separate(histogram):
    histogram.observe(("admin", "POST"), 0.2)
    assert histogram.count(("admin", "GET")) == 0


def test_histogram_wrong_label_count(histogram):
    with pytest.raises(ValueError):
        histogram.observe(("admin",), 0.1)


def test_histogram_rejects_plain_string(histogram):
    with pytest.raises(TypeError):
        histogram.count("admin")


def test_counter_increments():
    counter = Counter("test_total", "test", ["handler", "method", "status"])
    counter.inc(("admin", "POST", "200"))
    counter.inc(("admin", "POST", "200"))
    assert counter.value(("admin", "POST", "200")) == 2
    assert counter.value(("admin", "POST", "500")) == 0


def test_record_request_updates_module_metrics():
    before_count = REQUEST_COUNT.value(("character", "PATCH", "418"))
    before_obs = REQUEST_DURATION.count(("character", "PATCH"))
    record_request("character", "PATCH", 418, 0.2)
    assert REQUEST_COUNT.value(("character", "PATCH", "418")) == before_count + 1
    assert REQUEST_DURATION.count(("character", "PATCH")) == before_obs + 1


def test_status_recorder_passes_code_on():
    seen = []
    recorder = StatusRecorder(downstream=seen.append)
    recorder.write_header(404)
    assert recorder.status_code == 404
    assert seen == [404]


def test_status_recorder_without_downstream():
    recorder = StatusRecorder()
    recorder.write_header(201)
    assert recorder.status_code == 201