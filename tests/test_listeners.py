from app.models import Deal
from app.models.listeners import stamp_closed_on_insert


def test_deal_inserted_as_won_gets_closed_at():
    deal = Deal(title="Kiosk", value=100, stage="won")

    stamp_closed_on_insert(None, None, deal)

    assert deal.closed_at is not None


def test_open_deal_inserted_without_closed_at():
    deal = Deal(title="Kiosk", value=100, stage="lead")

    stamp_closed_on_insert(None, None, deal)

    assert deal.closed_at is None
