from app.core.constants import (
    BASE_RATING_THRESHOLDS,
    CLOSED_STAGES,
    PENDING_STAGES,
    QUALITY_BONUS_TIERS,
    RATED_ROLE,
    ROLE_CHECK_CLAUSE,
    STAGE_CHECK_CLAUSE,
    VOLUME_BONUS_TIERS,
)


def test_pending_and_closed_stages_partition_the_pipeline():
    assert CLOSED_STAGES == {"won", "lost"}
    assert PENDING_STAGES == {"lead", "qualification", "proposal", "negotiation"}


def test_check_clauses_list_every_value():
    assert ROLE_CHECK_CLAUSE == "role IN ('admin', 'contributor')"
    for stage in ("lead", "qualification", "proposal", "negotiation", "won", "lost"):
        assert repr(stage) in STAGE_CHECK_CLAUSE


def test_only_contributors_are_rated():
    assert RATED_ROLE == "contributor"


def test_tier_tables_are_ordered_highest_first():
    for table in (BASE_RATING_THRESHOLDS, VOLUME_BONUS_TIERS, QUALITY_BONUS_TIERS):
        minimums = [minimum for minimum, _ in table]
        assert minimums == sorted(minimums, reverse=True)
