import pytest
from pydantic import ValidationError

from finscope.domain.trades.schemas import TradeCreate
from finscope.domain.trades.services import calculate_pnl, create_trade, list_trades


def test_buy_profit():
    pnl, pnl_percent = calculate_pnl("buy", 100, 110, 5)

    assert pnl == pytest.approx(50)
    assert pnl_percent == pytest.approx(10)


def test_sell_profit_keeps_raw_price_move():
    pnl, pnl_percent = calculate_pnl("sell", 100, 90, 2)

    assert pnl == pytest.approx(20)
    assert pnl_percent == pytest.approx(-10)


def test_open_trade_has_no_pnl():
    assert calculate_pnl("buy", 100, None, 1) == (None, None)


def test_symbol_is_upper_cased():
    trade = TradeCreate(symbol=" aapl ", trade_type="buy", quantity=1, entry_price=150)

    assert trade.symbol == "AAPL"


@pytest.mark.parametrize("field", ["quantity", "entry_price"])
def test_non_positive_numbers_rejected(field):
    data = {"symbol": "VOO", "trade_type": "buy", "quantity": 1, "entry_price": 10, field: 0}

    with pytest.raises(ValidationError):
        TradeCreate(**data)


async def test_create_and_filter_trades(db_session, user):
    await create_trade(
        db_session,
        user_id=user.id,
        payload=TradeCreate(symbol="VOO", trade_type="buy", quantity=2, entry_price=400),
    )
    closed = await create_trade(
        db_session,
        user_id=user.id,
        payload=TradeCreate(
            symbol="TSLA",
            trade_type="sell",
            quantity=1,
            entry_price=250,
            exit_price=200,
            status="closed",
        ),
    )

    assert closed.pnl == pytest.approx(50)
    assert closed.pnl_percent == pytest.approx(-20)

    assert len(await list_trades(db_session, user_id=user.id)) == 2
    closed_only = await list_trades(db_session, user_id=user.id, status="closed")
    assert [trade.symbol for trade in closed_only] == ["TSLA"]
