import pytest

from apps.analytics.aggregator import aggregate, aggregate_by_day
from apps.analytics.schemas import AnalyticsSummary, MetricRow
from apps.core.errors import InvalidRowError


def test_empty_input_gives_zero_summary():
    summary = aggregate([])
    assert summary == AnalyticsSummary()
    assert summary.total_views == 0
    assert summary.total_visitors == 0
    assert summary.avg_time_on_page == 0.0
    assert summary.bounce_rate == 0.0
    assert summary.views_series == []
    assert summary.geography_top == []
    assert summary.referral_ranked == []
    assert summary.device_series == []


def test_end_to_end_scenario():
    rows = [
        {"date": "2024-01-01", "page_views": 10, "unique_visitors": 5},
        {"date": "2024-01-01", "page_views": 7, "unique_visitors": 3},
        {"date": "2024-01-02", "page_views": 4, "unique_visitors": 2},
    ]
    summary = aggregate(rows)
    assert summary.total_views == 21
    assert summary.total_visitors == 10
    assert [(p.date, p.views) for p in summary.views_series] == [
        ("2024-01-01", 17),
        ("2024-01-02", 4),
    ]


def test_same_date_counts_are_summed():
    days = aggregate_by_day(
        [
            {"date": "2024-02-01", "page_views": 3},
            {"date": "2024-02-01", "page_views": 5},
        ]
    )
    assert len(days) == 1
    assert days[0].page_views == 8
    assert days[0].row_count == 2


def test_rate_fields_are_mean_of_rows():
    days = aggregate_by_day(
        [
            {"date": "2024-02-01", "avg_time_on_page": 1.0, "bounce_rate": 10},
            {"date": "2024-02-01", "avg_time_on_page": 2.0, "bounce_rate": 20},
            {"date": "2024-02-01", "avg_time_on_page": 3.0, "bounce_rate": 30},
        ]
    )
    assert days[0].avg_time_on_page == pytest.approx(2.0)
    assert days[0].bounce_rate == pytest.approx(20.0)


def test_grand_average_divides_by_total_row_count():
    # two rows on day one (mean 4.0), one row on day two (6.0)
    summary = aggregate(
        [
            {"date": "2024-02-01", "avg_time_on_page": 2.0},
            {"date": "2024-02-01", "avg_time_on_page": 6.0},
            {"date": "2024-02-02", "avg_time_on_page": 6.0},
        ]
    )
    assert summary.avg_time_on_page == pytest.approx((4.0 + 6.0) / 3)


def test_geo_distribution_merges_per_day():
    days = aggregate_by_day(
        [
            {"date": "2024-03-01", "geo_distribution": {"US": 2}},
            {"date": "2024-03-01", "geo_distribution": {"US": 3, "FR": 1}},
        ]
    )
    assert days[0].geo_distribution == {"US": 5, "FR": 1}


def test_geography_top_is_truncated_to_six():
    geo = {f"C{i}": 100 - i for i in range(10)}
    summary = aggregate([{"date": "2024-03-01", "geo_distribution": geo}])
    assert len(summary.geography_top) == 6
    assert summary.geography_top[0].name == "C0"
    assert summary.geography_top[0].value == 100
    values = [entry.value for entry in summary.geography_top]
    assert values == sorted(values, reverse=True)


def test_referrals_are_ranked_across_days_without_truncation():
    rows = [
        {"date": "2024-03-01", "referral_sources": {"google": 2, "twitter": 5}},
        {"date": "2024-03-02", "referral_sources": {"google": 4, "direct": 1}},
    ] + [{"date": "2024-03-03", "referral_sources": {f"site{i}": 1 for i in range(8)}}]
    summary = aggregate(rows)
    assert [(e.name, e.value) for e in summary.referral_ranked[:3]] == [
        ("google", 6),
        ("twitter", 5),
        ("direct", 1),
    ]
    assert len(summary.referral_ranked) == 11


def test_ranking_ties_keep_first_seen_order():
    summary = aggregate([{"date": "2024-03-01", "geo_distribution": {"DE": 1, "AT": 1, "CH": 1}}])
    assert [e.name for e in summary.geography_top] == ["DE", "AT", "CH"]


def test_series_keeps_first_seen_date_order():
    summary = aggregate(
        [
            {"date": "2024-01-03", "page_views": 1},
            {"date": "2024-01-01", "page_views": 2},
            {"date": "2024-01-03", "page_views": 3},
        ]
    )
    assert [p.date for p in summary.views_series] == ["2024-01-03", "2024-01-01"]
    assert summary.views_series[0].views == 4


def test_device_series_splits_visitors():
    summary = aggregate([{"date": "2024-01-01", "unique_visitors": 10}])
    point = summary.device_series[0]
    assert (point.date, point.mobile, point.desktop) == ("2024-01-01", 6, 4)


def test_missing_date_raises_invalid_row():
    rows = [
        {"date": "2024-01-01", "page_views": 1},
        {"date": None, "page_views": 2},
    ]
    with pytest.raises(InvalidRowError):
        aggregate(rows)


def test_non_mapping_row_is_rejected():
    with pytest.raises(InvalidRowError):
        aggregate(["2024-01-01"])


def test_loose_numbers_are_coerced():
    row = MetricRow.from_record(
        {
            "id": 7,
            "date": "2024-01-01",
            "page_views": "12",
            "unique_visitors": None,
            "avg_time_on_page": "3.5",
            "bounce_rate": "n/a",
            "geo_distribution": None,
            "referral_sources": {"google": "2"},
        }
    )
    assert row.id == "7"
    assert row.page_views == 12
    assert row.unique_visitors == 0
    assert row.avg_time_on_page == 3.5
    assert row.bounce_rate == 0.0
    assert row.geo_distribution == {}
    assert row.referral_sources == {"google": 2.0}


def test_accepts_metric_row_instances():
    summary = aggregate([MetricRow(date="2024-01-01", page_views=3)])
    assert summary.total_views == 3


@pytest.mark.parametrize("bad", ["NaN", "inf", "-inf", "1e400", float("nan"), float("inf")])
def test_non_finite_numbers_become_zero(bad):
    row = MetricRow.from_record(
        {
            "date": "2024-01-01",
            "page_views": bad,
            "unique_visitors": bad,
            "avg_time_on_page": bad,
            "bounce_rate": bad,
            "geo_distribution": {"US": bad},
        }
    )
    assert row.page_views == 0
    assert row.unique_visitors == 0
    assert row.avg_time_on_page == 0.0
    assert row.bounce_rate == 0.0
    assert row.geo_distribution == {"US": 0.0}


def test_non_finite_rates_do_not_leak_into_summary():
    summary = aggregate(
        [
            {"date": "2024-01-01", "page_views": "NaN", "avg_time_on_page": "NaN", "bounce_rate": "inf"},
            {"date": "2024-01-01", "page_views": 4, "avg_time_on_page": 3.0, "bounce_rate": 40},
        ]
    )
    assert summary.total_views == 4
    assert summary.avg_time_on_page == pytest.approx(1.5)
    assert summary.bounce_rate == pytest.approx(20.0)
    assert "NaN" not in summary.model_dump_json()


def test_summary_schema_carries_example():
    assert AnalyticsSummary.model_json_schema()["example"]["total_views"] == 17
