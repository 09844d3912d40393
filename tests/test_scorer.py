"""
Integration tests for ChurnScorer.
"""

import itertools
import time

import pandas as pd
import pytest

from churnguard import ChurnScorer, ScoringConfig, ScoringStrategy
from churnguard.scorer import days_since, generate_sample_data


def single(days_ago, days=None, revenue="0", tickets="0", segment=None, date=None):
    if date is None:
        date = "" if days is None else days_ago(days)
    return {
        "LAST_ACTIVITY_DATE": date,
        "TOTAL_REVENUE": revenue,
        "SUPPORT_TICKETS": tickets,
        "SEGMENT": segment,
    }


class TestDaysSince:
    """Tests for inactivity derivation from raw dates."""

    def test_status_per_value(self, now, days_ago):
        dates = pd.Series([days_ago(95), "", None, "not-a-date", "  "])
        days, status = days_since(dates, now)

        assert days.iloc[0] == 95
        assert status.tolist() == ["valid", "missing", "missing", "invalid", "missing"]
        assert days.iloc[1:].isna().all()

    def test_partial_days_are_floored(self, now):
        dates = pd.Series(["2025-05-31T01:00:00Z"])
        days, _ = days_since(dates, now)

        assert days.iloc[0] == 0

    def test_words_are_not_dates(self, now):
        dates = pd.Series(["today", "now", "Yesterday", "2025-05-31"])
        days, status = days_since(dates, now)

        assert status.tolist() == ["invalid", "invalid", "invalid", "valid"]
        assert days.iloc[:3].isna().all()

    def test_word_date_scores_as_invalid(self, scorer, now):
        result = scorer.score_single(
            {
                "LAST_ACTIVITY_DATE": "today",
                "TOTAL_REVENUE": "200",
                "SUPPORT_TICKETS": "0",
                "SEGMENT": "smb",
            },
            now=now,
        )

        assert result["CHURN_SCORE"] == 10
        assert result["RISK_FACTORS"] == ["Last activity date unknown or invalid"]

    def test_mixed_formats(self, now):
        dates = pd.Series(["2025-03-03", "03/03/2025", "2025-03-03T00:00:00+00:00"])
        days, status = days_since(dates, now)

        assert (status == "valid").all()
        assert (days == 90).all()


class TestImportTimeScenarios:
    """Reference scenarios for the CSV upload heuristic."""

    def test_no_activity_no_revenue(self, scorer, now, days_ago):
        result = scorer.score_single(single(days_ago), now=now)

        assert result["CHURN_SCORE"] == 50
        assert result["RISK_LEVEL"] == "high"
        assert result["RISK_FACTORS"] == ["No recorded activity", "No revenue generated"]

    def test_long_inactive_paying_customer(self, scorer, now, days_ago):
        result = scorer.score_single(
            single(days_ago, days=95, revenue="50000", tickets="2"), now=now
        )

        assert result["components"] == {
            "activity": 40, "tickets": 10, "revenue": 0, "segment": 0,
        }
        assert result["CHURN_SCORE"] == 50
        assert result["RISK_LEVEL"] == "high"
        assert result["RISK_FACTORS"] == ["95 days since last activity"]

    def test_invalid_date(self, scorer, now, days_ago):
        result = scorer.score_single(
            single(days_ago, date="not-a-date", revenue="200"), now=now
        )

        assert result["CHURN_SCORE"] == 10
        assert result["RISK_LEVEL"] == "low"
        assert result["RISK_FACTORS"] == ["Last activity date unknown or invalid"]

    def test_sentinel_when_no_factors(self, scorer, now, days_ago):
        result = scorer.score_single(
            single(days_ago, days=5, revenue="500", tickets="3"), now=now
        )

        assert result["CHURN_SCORE"] == 10
        assert result["RISK_FACTORS"] == ["No significant risk factors detected"]

    def test_factor_order(self, scorer, now, days_ago):
        result = scorer.score_single(
            single(days_ago, days=120, revenue="40", tickets="11"), now=now
        )

        assert result["CHURN_SCORE"] == 80
        assert result["RISK_LEVEL"] == "critical"
        assert result["RISK_FACTORS"] == [
            "120 days since last activity",
            "High support ticket volume (11)",
            "Low revenue ($40.00)",
        ]


class TestBulkReanalysisScenarios:
    """The re-analysis heuristic stays distinct from the import-time one."""

    def test_worst_case_enterprise(self, bulk_scorer, now, days_ago):
        result = bulk_scorer.score_single(
            single(days_ago, days=400, revenue="0", tickets="12", segment="enterprise"),
            now=now,
        )

        assert result["CHURN_SCORE"] == 100
        assert result["RISK_LEVEL"] == "critical"
        assert result["RISK_FACTORS"] == [
            "400 days since last activity",
            "High support ticket volume (12)",
            "No revenue generated",
            "Enterprise segment account",
        ]

    def test_high_value_clamped_at_zero(self, bulk_scorer, now, days_ago):
        result = bulk_scorer.score_single(
            single(days_ago, days=10, revenue="20000", segment="smb"), now=now
        )

        assert result["components"]["revenue"] == -15
        assert result["CHURN_SCORE"] == 0
        assert result["RISK_LEVEL"] == "low"
        assert result["RISK_FACTORS"] == ["No significant risk factors detected"]

    def test_strategies_disagree(self, now, days_ago):
        """Same customer, different heuristics, different scores."""
        customer = single(days_ago, days=95, revenue="50000", tickets="2")
        import_time = ChurnScorer.for_strategy("import_time").score_single(customer, now=now)
        bulk = ChurnScorer.for_strategy(ScoringStrategy.BULK_REANALYSIS).score_single(
            customer, now=now
        )

        assert import_time["CHURN_SCORE"] == 50
        assert bulk["CHURN_SCORE"] == 10  # 25 inactivity - 15 high value


class TestScoringProperties:
    """Determinism, monotonicity, clamping and factor invariants."""

    def test_deterministic(self, scorer, now, days_ago):
        customer = single(days_ago, days=45, revenue="75", tickets="7")
        first = scorer.score_single(customer, now=now)

        for _ in range(5):
            assert scorer.score_single(customer, now=now) == first

    @pytest.mark.parametrize("strategy", list(ScoringStrategy))
    def test_monotonic_in_inactivity(self, strategy, now, days_ago):
        scorer = ChurnScorer.for_strategy(strategy)
        df = pd.DataFrame([
            single(days_ago, days=d, revenue="150", tickets="1") for d in range(0, 500, 1)
        ])
        scores = scorer.score(df, now=now).df["CHURN_SCORE"]

        assert scores.is_monotonic_increasing

    def test_crossing_thirty_days(self, scorer, now, days_ago):
        low = scorer.score_single(single(days_ago, days=29, revenue="150"), now=now)
        high = scorer.score_single(single(days_ago, days=31, revenue="150"), now=now)

        assert high["CHURN_SCORE"] >= low["CHURN_SCORE"]
        assert high["CHURN_SCORE"] - low["CHURN_SCORE"] == 15

    @pytest.mark.parametrize("strategy", list(ScoringStrategy))
    def test_scores_clamped_and_factors_non_empty(self, strategy, now, days_ago):
        dates = ["", "garbage", days_ago(0), days_ago(45), days_ago(100), days_ago(500)]
        revenues = ["0", "-50", "99.5", "1000", "50000", "abc"]
        tickets = ["0", "3", "8", "40", "-2", "x"]
        segments = [None, "enterprise", "smb"]
        df = pd.DataFrame([
            single(days_ago, date=d, revenue=r, tickets=t, segment=s)
            for d, r, t, s in itertools.product(dates, revenues, tickets, segments)
        ])
        result = ChurnScorer.for_strategy(strategy).score(df, now=now)

        assert result.df["CHURN_SCORE"].between(0, 100).all()
        assert result.df["RISK_FACTORS"].map(len).min() >= 1

    def test_clamps_custom_config(self, now, days_ago):
        config = ScoringConfig(missing_activity_points=90, zero_revenue_points=90)
        result = ChurnScorer(config).score_single(single(days_ago), now=now)

        assert result["CHURN_SCORE"] == 100
        assert result["RISK_LEVEL"] == "critical"


class TestChurnScorer:
    """Integration tests for the vectorized scorer."""

    def test_score_returns_all_components(self, scorer, sample_data, now):
        result = scorer.score(sample_data, now=now)

        for column in ["CHURN_SCORE", "RISK_LEVEL", "RISK_FACTORS",
                       "activity_score", "tickets_score", "revenue_score", "segment_score"]:
            assert column in result.df.columns

    def test_churn_score_is_clamped_sum(self, bulk_scorer, sample_data, now):
        result = bulk_scorer.score(sample_data, now=now)
        component_sum = result.df[result.component_columns].sum(axis=1)

        assert (result.df["CHURN_SCORE"] == component_sum.clip(0, 100)).all()

    def test_input_not_modified(self, scorer, sample_data, now):
        original = sample_data.copy()
        scorer.score(sample_data, now=now)

        pd.testing.assert_frame_equal(sample_data, original)

    def test_edge_cases(self, scorer, edge_cases, now):
        df = scorer.score(edge_cases, now=now).df.set_index("CUSTOMER_ID")

        assert df.loc["EDGE_NO_ACTIVITY", "CHURN_SCORE"] == 50
        assert df.loc["EDGE_HIGH_RISK", "RISK_LEVEL"] == "critical"
        assert df.loc["EDGE_LOW_RISK", "RISK_LEVEL"] == "low"
        assert df.loc["EDGE_INVALID_DATE", "CHURN_SCORE"] == 10

    def test_get_high_risk_filters_correctly(self, scorer, edge_cases, now):
        result = scorer.score(edge_cases, now=now)

        high_risk = result.get_high_risk("high")
        assert high_risk["RISK_LEVEL"].isin(["high", "critical"]).all()
        assert "EDGE_NO_ACTIVITY" in high_risk["CUSTOMER_ID"].tolist()

        critical = result.get_high_risk("critical")
        assert (critical["RISK_LEVEL"] == "critical").all()

    def test_summary_returns_dataframe(self, scorer, sample_data, now):
        summary = scorer.score(sample_data, now=now).summary()

        assert isinstance(summary, pd.DataFrame)
        assert "count" in summary.columns
        assert "avg_score" in summary.columns
        assert summary["count"].sum() == len(sample_data)

    def test_component_breakdown_returns_stats(self, scorer, sample_data, now):
        breakdown = scorer.score(sample_data, now=now).component_breakdown()

        assert "activity" in breakdown.index
        assert "revenue" in breakdown.index
        assert "mean" in breakdown.columns

    def test_empty_frame(self, scorer, now):
        df = pd.DataFrame(columns=ChurnScorer.REQUIRED_COLUMNS)
        result = scorer.score(df, now=now)

        assert len(result.df) == 0

    def test_missing_column_raises_error(self, scorer):
        bad_data = pd.DataFrame({"CUSTOMER_ID": ["TEST"]})

        with pytest.raises(ValueError, match="Missing required columns"):
            scorer.score(bad_data)

    def test_vectorized_performance(self, scorer, now):
        """Scoring 10k customers should complete in a few seconds."""
        large_data = generate_sample_data(n_customers=10000, seed=123, now=now)

        start = time.time()
        result = scorer.score(large_data, now=now)
        elapsed = time.time() - start

        assert elapsed < 10.0, f"Scoring took {elapsed:.2f}s"
        assert len(result.df) == 10000
