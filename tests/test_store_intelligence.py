"""
Store Intelligence Tests
=========================
Urgency tiers, reorder cycle estimation, revenue windows, order matching
and call-list ordering. Every test pins the clock to AS_OF.
"""

import pandas as pd
import pytest

from models.sales import StoreIntelligence
from services.store_intelligence import (
    StoreIntelligenceAggregator,
    FuzzyNameMatcher,
    StoreIdMatcher,
    average_cycle,
    classify_urgency,
    filter_stores,
    names_match,
    normalize_as_of,
    prioritize,
    sort_stores,
    to_frame,
    urgency_counts,
    whole_days,
)
from tests.conftest import AS_OF, days_ago, make_orders, make_stores


def build(stores, orders, matcher=None):
    aggregator = StoreIntelligenceAggregator(matcher=matcher)
    return aggregator.build(make_stores(stores), make_orders(orders), as_of=AS_OF)


def order(buyer, age_days, amount=None, **extra):
    record = {'buyer_name': buyer, 'order_date': days_ago(age_days), 'total_amount': amount}
    record.update(extra)
    return record


# =============================================================================
# URGENCY
# =============================================================================


class TestClassifyUrgency:
    """Break points sit at avg_cycle * 1.2 and avg_cycle * 1.5."""

    @pytest.mark.parametrize("days, expected", [
        (0, 'good'),
        (10, 'good'),
        (12, 'good'),
        (13, 'warning'),
        (15, 'warning'),
        (16, 'urgent'),
        (999, 'urgent'),
    ])
    def test_break_points_for_ten_day_cycle(self, days, expected):
        urgency, _ = classify_urgency(days, 10)
        assert urgency == expected

    def test_urgency_never_improves_as_days_grow(self):
        rank = {'good': 0, 'warning': 1, 'urgent': 2}
        for avg_cycle in (7, 14, 15, 30):
            tiers = [rank[classify_urgency(days, avg_cycle)[0]] for days in range(0, 120)]
            assert tiers == sorted(tiers)

    def test_score_is_days_overdue(self):
        assert classify_urgency(25, 14) == ('urgent', 11)
        assert classify_urgency(14, 14) == ('good', 0)
        assert classify_urgency(3, 14) == ('good', 0)


# =============================================================================
# CYCLE AND DAY COUNTS
# =============================================================================


class TestAverageCycle:

    def test_gaps_of_ninety_days_or_more_are_ignored(self):
        dates = [
            pd.Timestamp('2026-03-01'),
            pd.Timestamp('2026-02-24'),   # 5 days
            pd.Timestamp('2025-08-08'),   # 200 days
            pd.Timestamp('2025-07-29'),   # 10 days
        ]
        assert average_cycle(dates) == 8

    def test_half_day_mean_rounds_up(self):
        dates = [pd.Timestamp('2026-01-10'), pd.Timestamp('2026-01-09'), pd.Timestamp('2026-01-07')]
        assert average_cycle(dates) == 2   # mean of 1 and 2

    def test_single_order_uses_default(self):
        assert average_cycle([pd.Timestamp('2026-01-10')]) == 14
        assert average_cycle([]) == 14

    def test_same_day_orders_use_default(self):
        same_day = [pd.Timestamp('2026-01-10 15:00'), pd.Timestamp('2026-01-10 09:00')]
        assert average_cycle(same_day) == 14

    def test_exactly_ninety_days_is_an_outlier(self):
        dates = [pd.Timestamp('2026-04-01'), pd.Timestamp('2026-01-01')]
        assert whole_days(dates[0], dates[1]) == 90
        assert average_cycle(dates) == 14


def test_whole_days_floors_partial_days():
    assert whole_days(AS_OF, AS_OF - pd.Timedelta(hours=119)) == 4
    assert whole_days(AS_OF, AS_OF - pd.Timedelta(days=5)) == 5


def test_normalize_as_of_drops_timezone():
    ts = normalize_as_of("2026-10-18T14:00:00+02:00")
    assert ts == pd.Timestamp("2026-10-18 12:00:00")
    assert ts.tzinfo is None


# =============================================================================
# MATCHING
# =============================================================================


class TestMatching:

    def test_store_name_inside_buyer_name(self):
        assert names_match("The Green Room Denver", "Green Room")

    def test_buyer_name_inside_store_name(self):
        assert names_match("Green Room", "The Green Room Denver")

    def test_case_is_ignored(self):
        assert names_match("GREEN ROOM", "green room")

    def test_unrelated_and_blank_names_do_not_match(self):
        assert not names_match("Higher Grade", "Green Room")
        assert not names_match("", "Green Room")
        assert not names_match(None, "Green Room")
        assert not names_match(float('nan'), "Nanaimo Cannabis")

    def test_fuzzy_matcher_returns_mask(self):
        orders = make_orders([
            order("The Green Room Denver", 3, 10),
            order("Higher Grade", 3, 10),
            order(None, 3, 10),
        ])
        mask = FuzzyNameMatcher().match({'id': 1, 'name': 'Green Room'}, orders)
        assert mask.tolist() == [True, False, False]

    def test_store_id_wins_over_name_and_falls_back_without_one(self):
        stores = [
            {'id': 1, 'name': 'Green Room'},
            {'id': 2, 'name': 'Green Room Denver'},
        ]
        orders = [
            order("Green Room Denver", 3, 100, store_id=2),
            order("Green Room", 10, 40),
        ]
        by_name = {s.id: s for s in build(stores, orders, matcher=StoreIdMatcher())}

        assert by_name[1].order_count == 1
        assert by_name[1].total_revenue == 40
        assert by_name[2].order_count == 2
        assert by_name[2].total_revenue == 140

    def test_fuzzy_matching_can_attribute_one_order_to_two_stores(self):
        stores = [{'id': 1, 'name': 'Green Room'}, {'id': 2, 'name': 'Green Room Denver'}]
        intel = build(stores, [order("Green Room Denver", 3, 100)])
        assert [s.order_count for s in intel] == [1, 1]


# =============================================================================
# AGGREGATION
# =============================================================================


class TestAggregation:

    def test_two_order_store(self):
        intel = build(
            [{'id': 1, 'name': 'A', 'city': 'Denver'}],
            [order('A', 5, 100), order('A', 20, 50)],
        )[0]

        assert intel.order_count == 2
        assert intel.total_revenue == 150
        assert intel.avg_cycle == 15
        assert intel.days_since_last_order == 5
        assert intel.urgency == 'good'
        assert intel.urgency_score == 0
        assert intel.revenue_90d == 150
        assert intel.city == 'Denver'
        assert intel.last_order['total_amount'] == 100

    def test_store_without_orders_is_urgent(self):
        intel = build([{'id': 1, 'name': 'Lonely Leaf'}], [order('Someone Else', 5, 100)])[0]

        assert intel.order_count == 0
        assert intel.total_revenue == 0
        assert intel.last_order is None
        assert intel.days_since_last_order == 999
        assert intel.avg_cycle == 14
        assert intel.urgency == 'urgent'
        assert intel.urgency_score == 985

    def test_store_without_any_orders_at_all(self):
        intel = build([{'id': 1, 'name': 'Lonely Leaf'}], [])[0]
        assert intel.days_since_last_order == 999
        assert intel.urgency == 'urgent'

    def test_outlier_gap_excluded_from_cycle(self):
        intel = build(
            [{'id': 1, 'name': 'A'}],
            [order('A', 1, 10), order('A', 6, 10), order('A', 206, 10), order('A', 216, 10)],
        )[0]
        assert intel.avg_cycle == 8
        assert intel.days_since_last_order == 1

    def test_revenue_is_independent_of_input_order_and_missing_amounts(self):
        records = [order('A', 3, 10.5), order('A', 30, None), order('A', 9, 20.25), order('A', 60, 4)]
        forward = build([{'id': 1, 'name': 'A'}], records)[0]
        backward = build([{'id': 1, 'name': 'A'}], list(reversed(records)))[0]

        assert forward.total_revenue == pytest.approx(34.75)
        assert backward.total_revenue == forward.total_revenue
        assert backward.avg_cycle == forward.avg_cycle
        assert backward.last_order == forward.last_order

    def test_ninety_day_window(self):
        intel = build(
            [{'id': 1, 'name': 'A'}],
            [order('A', 89, 50), order('A', 90, 25), order('A', 91, 100)],
        )[0]
        assert intel.revenue_90d == 75
        assert intel.total_revenue == 175

    def test_undated_orders_count_toward_revenue_only(self):
        orders = [order('A', 5, 100), {'buyer_name': 'A', 'order_date': 'not a date', 'total_amount': 30}]
        intel = build([{'id': 1, 'name': 'A'}], orders)[0]

        assert intel.order_count == 2
        assert intel.total_revenue == 130
        assert intel.days_since_last_order == 5
        assert intel.revenue_90d == 100

    def test_overdue_store_scores_days_past_cycle(self):
        # cycle 10, last order 20 days ago -> urgent, 10 days overdue
        intel = build([{'id': 1, 'name': 'A'}], [order('A', 20, 1), order('A', 30, 1)])[0]
        assert intel.avg_cycle == 10
        assert intel.urgency == 'urgent'
        assert intel.urgency_score == 10
        assert intel.overdue_days == 10
        assert intel.days_until_next_order == -10

    def test_next_expected_order_is_last_order_plus_cycle(self):
        intel = build([{'id': 1, 'name': 'A'}], [order('A', 5, 100), order('A', 20, 50)])[0]
        # last order 2026-10-13, cycle 15
        assert intel.next_expected_order == '2026-10-28'
        assert intel.days_until_next_order == 10

    def test_no_next_expected_order_without_history(self):
        intel = build([{'id': 1, 'name': 'Lonely Leaf'}], [])[0]
        assert intel.next_expected_order is None

    def test_product_mix_comes_from_line_items(self):
        orders = [order('A', 5, 300, line_items=[
            {'product_name': 'Purple Punch', 'category': 'Flower', 'strain_type': 'Indica', 'revenue': 200},
            {'product_name': 'Lemon Haze', 'category': 'Vape', 'strain_type': 'Sativa-dominant', 'revenue': 100},
        ])]
        intel = build([{'id': 1, 'name': 'A'}], orders)[0]

        assert intel.top_products[0]['product_name'] == 'Purple Punch'
        assert intel.category_breakdown == {'Flower': 200.0, 'Vape': 100.0}
        assert intel.strain_type_breakdown == {'indica': 200.0, 'sativa': 100.0, 'hybrid': 0.0}


# =============================================================================
# FILTER / SORT
# =============================================================================


def intel_for(name, urgency, score=0, days=0):
    return StoreIntelligence(id=name, name=name, urgency=urgency, urgency_score=score,
                             days_since_last_order=days)


class TestCallList:

    @pytest.fixture
    def stores(self):
        return [
            intel_for('Good Vibes', 'good', 0, 3),
            intel_for('Warning Weed', 'warning', 4, 18),
            intel_for('Urgent Buds', 'urgent', 10, 30),
            intel_for('Also Urgent', 'urgent', 10, 30),
            intel_for('Very Urgent', 'urgent', 40, 60),
            intel_for('Tied Score Older', 'warning', 4, 25),
        ]

    def test_tiers_then_score_then_days_then_name(self, stores):
        names = [s.name for s in sort_stores(stores)]
        assert names == [
            'Very Urgent', 'Also Urgent', 'Urgent Buds',
            'Tied Score Older', 'Warning Weed',
            'Good Vibes',
        ]

    def test_filter_by_tier(self, stores):
        assert {s.name for s in filter_stores(stores, 'warning')} == {'Warning Weed', 'Tied Score Older'}
        assert len(filter_stores(stores, 'all')) == len(stores)

    def test_search_is_case_insensitive_substring(self, stores):
        assert [s.name for s in filter_stores(stores, search='URGENT')] == [
            'Urgent Buds', 'Also Urgent', 'Very Urgent'
        ]

    def test_prioritize_filters_then_sorts(self, stores):
        assert [s.name for s in prioritize(stores, 'urgent', 'urgent')] == [
            'Very Urgent', 'Also Urgent', 'Urgent Buds'
        ]

    def test_counts(self, stores):
        assert urgency_counts(stores) == {'urgent': 3, 'warning': 2, 'good': 1}

    def test_frame_keeps_call_list_order(self, stores):
        df = to_frame(sort_stores(stores))
        assert df['name'].iloc[0] == 'Very Urgent'
        assert len(df) == len(stores)
        assert 'next_expected_order' in df.columns

    def test_frame_exports_to_csv(self, stores):
        csv = to_frame(sort_stores(stores)).to_csv(index=False)
        assert csv.splitlines()[0].startswith('name,city,urgency,days_since_last_order')
        assert len(csv.splitlines()) == len(stores) + 1
