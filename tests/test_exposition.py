import pytest

from bird_exporter.exposition import Metric, MetricDesc, MetricExporter, format_metrics


def _sample_lines(text):
    return [line for line in text.splitlines() if not line.startswith("#")]


def test_single_metric_without_labels():
    desc = MetricDesc(
        "bird_socket_query_success",
        "Result of querying bird socket: 0 = failed, 1 = suceeded",
    )
    text = format_metrics([desc.gauge(1)])
    assert text == (
        "# HELP bird_socket_query_success Result of querying bird socket: 0 = failed, 1 = suceeded\n"
        "# TYPE bird_socket_query_success gauge\n"
        "bird_socket_query_success 1\n"
    )


def test_gauge_keeps_value_and_labels():
    desc = MetricDesc("bird_ospf_running", "State", ("name",))
    metric = desc.gauge(0.5, "ospf1")
    assert isinstance(metric, Metric)
    assert metric.name == "bird_ospf_running"
    assert metric.value == 0.5
    assert metric.labels == {"name": "ospf1"}


def test_gauge_with_wrong_label_count_raises():
    desc = MetricDesc("bird_ospf_running", "State", ("name",))
    with pytest.raises(ValueError):
        desc.gauge(1)
    with pytest.raises(ValueError):
        desc.gauge(1, "a", "b")


@pytest.mark.parametrize("name", ["", "1abc", "with space", "bad-name"])
def test_invalid_metric_name_raises(name):
    with pytest.raises(ValueError):
        MetricDesc(name, "help")


@pytest.mark.parametrize("labels", [("name", "name"), ("1x",), ("__reserved",), ("a b",)])
def test_invalid_label_names_raise(labels):
    with pytest.raises(ValueError):
        MetricDesc("metric", "help", labels)


def test_label_values_are_escaped():
    desc = MetricDesc("m", "help", ("name",))
    text = format_metrics([desc.gauge(1, 'a"b\\c\nd')])
    assert 'm{name="a\\"b\\\\c\\nd"} 1' in text


def test_labels_are_sorted_by_name():
    desc = MetricDesc("m", "help", ("zeta", "alpha"))
    text = format_metrics([desc.gauge(2, "z", "a")])
    assert _sample_lines(text) == ['m{alpha="a",zeta="z"} 2']


def test_families_are_sorted_and_described_once():
    first = MetricDesc("b_metric", "help b", ("name",))
    second = MetricDesc("a_metric", "help a", ("name",))
    text = format_metrics([first.gauge(1, "x"), second.gauge(2, "y"), first.gauge(3, "w")])
    help_lines = [line for line in text.splitlines() if line.startswith("# HELP")]
    assert [line.split()[2] for line in help_lines] == ["a_metric", "b_metric"]
    samples = _sample_lines(text)
    assert samples == ['a_metric{name="y"} 2', 'b_metric{name="w"} 3', 'b_metric{name="x"} 1']


def test_duplicate_samples_are_dropped():
    desc = MetricDesc("m", "help", ("name",))
    text = format_metrics([desc.gauge(1, "x"), desc.gauge(5, "x")])
    assert _sample_lines(text) == ['m{name="x"} 1']


def test_inconsistent_label_names_are_dropped():
    one = MetricDesc("m", "help", ("name",))
    other = MetricDesc("m", "help", ("name", "extra"))
    text = format_metrics([one.gauge(1, "x"), other.gauge(2, "y", "z")])
    assert _sample_lines(text) == ['m{name="x"} 1']


def test_inconsistent_help_is_dropped():
    one = MetricDesc("m", "help one")
    other = MetricDesc("m", "help two")
    text = format_metrics([one.gauge(1), other.gauge(2)])
    assert _sample_lines(text) == ["m 1"]


@pytest.mark.parametrize(
    "value, rendered",
    [(float("nan"), "NaN"), (float("inf"), "+Inf"), (float("-inf"), "-Inf"), (0.1, "0.1"), (3600, "3600")],
)
def test_special_and_plain_values(value, rendered):
    text = format_metrics([MetricDesc("m", "help").gauge(value)])
    assert _sample_lines(text) == [f"m {rendered}"]


def test_empty_input_renders_nothing():
    assert format_metrics([]) == ""


def test_metric_exporter_is_abstract():
    with pytest.raises(TypeError):
        MetricExporter()