from datetime import UTC, datetime

import pytest

from tenantstats.constants.stats_constants import DEFAULT_SUBSCRIPTION_LANGUAGES
from tenantstats.services.statistics.subscription_picker import (
    pick_account_subscriptions,
    pick_subscription_names,
    resolve_subscription_names,
)
from tenantstats.types.stats import SubscriptionHistoryRow, SubscriptionTextRow


def _at(day: int) -> datetime:
    return datetime(2024, 6, day, tzinfo=UTC)


@pytest.mark.unit
def test_active_subscription_wins_over_more_recent_inactive_one() -> None:
    picked = pick_account_subscriptions(
        [
            SubscriptionHistoryRow("a1", "s-old", is_active=False, start_date=_at(10), end_date=_at(20)),
            SubscriptionHistoryRow("a1", "s-live", is_active=True, start_date=_at(1), end_date=None),
        ],
    )
    assert picked == {"a1": "s-live"}


@pytest.mark.unit
def test_latest_end_then_start_date_breaks_ties_with_nulls_last() -> None:
    picked = pick_account_subscriptions(
        [
            SubscriptionHistoryRow("a1", "s-null", is_active=False, start_date=None, end_date=None),
            SubscriptionHistoryRow("a1", "s-early", is_active=False, start_date=_at(1), end_date=_at(5)),
            SubscriptionHistoryRow("a1", "s-late", is_active=False, start_date=_at(2), end_date=_at(9)),
            SubscriptionHistoryRow("a2", "s-a", is_active=True, start_date=_at(1), end_date=_at(9)),
            SubscriptionHistoryRow("a2", "s-b", is_active=True, start_date=_at(3), end_date=_at(9)),
        ],
    )
    assert picked == {"a1": "s-late", "a2": "s-b"}


@pytest.mark.unit
def test_preferred_languages_share_one_tier_ordered_by_code() -> None:
    rows = [
        SubscriptionTextRow("s1", "en", "Premium"),
        SubscriptionTextRow("s1", "nb", "Premium NB"),
        SubscriptionTextRow("s2", "sv", "Bas SV"),
        SubscriptionTextRow("s2", "de", "Basis DE"),
        SubscriptionTextRow("s3", "EN", "Starter"),
    ]

    names = pick_subscription_names(rows, ("nb", "no", "en"))

    assert names == {"s1": "Premium", "s2": "Basis DE", "s3": "Starter"}


@pytest.mark.unit
def test_english_name_wins_over_norwegian_with_default_languages() -> None:
    rows = [
        SubscriptionTextRow("s1", "nb", "Norsk"),
        SubscriptionTextRow("s1", "en", "English"),
        SubscriptionTextRow("s1", "de", "Deutsch"),
    ]

    names = pick_subscription_names(rows, DEFAULT_SUBSCRIPTION_LANGUAGES)

    assert names["s1"] == "English"


@pytest.mark.unit
def test_resolve_subscription_names_leaves_missing_text_as_none() -> None:
    history = [
        SubscriptionHistoryRow("a1", "s1", is_active=True),
        SubscriptionHistoryRow("a2", "s-unknown", is_active=True),
    ]
    texts = [SubscriptionTextRow("s1", "no", "Standard")]

    names = resolve_subscription_names(history, texts, ("nb", "no"))

    assert names == {"a1": "Standard", "a2": None}
