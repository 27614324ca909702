from datetime import timedelta

import pytest

from models import BalanceItem
from summarizer import (
    NOTE_AIRDROP_HUNTER,
    NOTE_DORMANT,
    NOTE_HIGH_GAS,
    native_balance,
    rank_tokens,
    recent_transactions,
    summarize,
    top_counterparties,
    tx_method,
    windowed_activity,
)
from tests.factories import NOW, days_ago, iso, native_item, token_item, tx_item


# ── Native balance ────────────────────────────────────────────────────────────


def test_native_balance_zero_without_native_item():
    balances = [token_item("USDC"), token_item("DAI", raw="5", decimals=0)]
    assert native_balance(balances) == 0


def test_native_balance_rounds_to_six_decimals():
    summary = summarize([native_item("1234567000000000000")], [], NOW)
    assert summary.native_balance == 1.234567


def test_native_balance_item_without_contract_address_counts_as_native():
    item = BalanceItem(asset_type="cryptocurrency", raw_balance="500000000000000000", ticker_symbol="ETH")
    assert native_balance([token_item("USDC"), item]) == 0.5


def test_native_balance_defaults_to_18_decimals():
    assert native_balance([native_item("3000000000000000000", decimals=None)]) == 3


def test_native_balance_uses_first_native_item():
    balances = [native_item("1000000000000000000"), native_item("9000000000000000000")]
    assert native_balance(balances) == 1


def test_native_balance_malformed_raw_is_zero():
    assert native_balance([native_item("not-a-number")]) == 0


# ── Token ranking ─────────────────────────────────────────────────────────────


def test_rank_tokens_filters_and_sorts_by_usd():
    balances = [
        native_item(),
        token_item("LOW", usd=1.0),
        token_item("NONE", usd=None),
        token_item("HIGH", usd=250.5),
        token_item("ZERO", raw="0", usd=999.0),
        token_item("NFT", asset_type="nft", usd=500.0),
        token_item("DUST", asset_type="dust", usd=0.01),
    ]

    holdings, count = rank_tokens(balances)

    assert [t.symbol for t in holdings] == ["HIGH", "LOW", "NONE"]
    assert count == 3
    assert all(t.balance > 0 for t in holdings)
    assert holdings[2].usd_estimate is None


def test_rank_tokens_rounds_balance():
    holdings, _ = rank_tokens([token_item("USDC", raw="1234567891", decimals=6, usd=1234.57)])
    assert holdings[0].balance == 1234.567891


def test_rank_tokens_truncates_to_20_stably_and_flags_airdrop_hunter():
    balances = [token_item(f"T{i}", raw=str(i + 1), usd=None) for i in range(30)]

    summary = summarize(balances, [], NOW)

    assert len(summary.token_holdings) == 20
    assert [t.symbol for t in summary.token_holdings] == [f"T{i}" for i in range(20)]
    assert summary.notes == [NOTE_AIRDROP_HUNTER]


def test_rank_tokens_exactly_25_is_not_airdrop_hunter():
    balances = [token_item(f"T{i}", usd=float(i)) for i in range(25)]
    summary = summarize(balances, [], NOW)
    assert NOTE_AIRDROP_HUNTER not in summary.notes


def test_token_holdings_sorted_descending_with_missing_usd_as_zero():
    balances = [
        token_item("A", usd=None),
        token_item("B", usd=3.0),
        token_item("C", usd=0.0),
        token_item("D", usd=10.0),
    ]
    holdings, _ = rank_tokens(balances)
    estimates = [t.usd_estimate or 0 for t in holdings]
    assert estimates == sorted(estimates, reverse=True)
    assert [t.symbol for t in holdings] == ["D", "B", "A", "C"]


# ── Windows ───────────────────────────────────────────────────────────────────


def test_gas_spent_at_now_counts_in_both_windows():
    txs = [tx_item(iso(NOW), gas_price="50000000000", gas_spent="21000")]

    summary = summarize([], txs, NOW)

    assert summary.gas_spent_30d == 0.00105
    assert summary.gas_spent_90d == 0.00105
    assert summary.tx_count_30d == 1
    assert summary.tx_count_90d == 1


def test_window_boundaries():
    txs = [
        tx_item(iso(NOW - timedelta(days=30)), gas_price="1000000000", gas_spent="1000000"),
        tx_item(days_ago(30.5), gas_price="1000000000", gas_spent="2000000"),
        tx_item(iso(NOW - timedelta(days=90)), gas_price="1000000000", gas_spent="3000000"),
        tx_item(days_ago(91), gas_price="1000000000", gas_spent="4000000"),
    ]

    stats = windowed_activity(txs, NOW)

    assert stats.tx_count_30d == 1
    assert stats.tx_count_90d == 3
    assert stats.gas_spent_30d == pytest.approx(0.001)
    assert stats.gas_spent_90d == pytest.approx(0.006)


def test_unparseable_timestamps_belong_to_no_window():
    stats = windowed_activity([tx_item("yesterday"), tx_item("")], NOW)
    assert stats.tx_count_30d == 0
    assert stats.tx_count_90d == 0


@pytest.mark.parametrize("age_days", [0, 1, 15, 29, 31, 45, 89, 95, 400])
def test_30d_count_never_exceeds_90d_count(age_days):
    txs = [tx_item(days_ago(age_days)), tx_item(days_ago(age_days / 2)), tx_item(days_ago(age_days * 3))]
    summary = summarize([], txs, NOW)
    assert summary.tx_count_30d <= summary.tx_count_90d


def test_malformed_gas_fields_count_as_zero():
    txs = [tx_item(iso(NOW), gas_price="abc", gas_spent="21000"), tx_item(iso(NOW), gas_price="NaN")]
    summary = summarize([], txs, NOW)
    assert summary.gas_spent_30d == 0
    assert summary.tx_count_30d == 2


def test_naive_now_is_treated_as_utc():
    txs = [tx_item(days_ago(10))]
    stats = windowed_activity(txs, NOW.replace(tzinfo=None))
    assert stats.tx_count_30d == 1


# ── Counterparties ────────────────────────────────────────────────────────────


def test_top_counterparties_by_count_then_first_seen():
    a, b, c = "0x" + "a" * 40, "0x" + "b" * 40, "0x" + "c" * 40
    txs = [
        tx_item(days_ago(1), to=c),
        tx_item(days_ago(2), to=a.upper().replace("0X", "0x")),
        tx_item(days_ago(3), to=b),
        tx_item(days_ago(4), to=a),
        tx_item(days_ago(5), to=b),
    ]
    assert top_counterparties(txs, NOW) == [a, b, c]


def test_top_counterparties_limits_and_skips():
    addrs = ["0x" + str(i) * 40 for i in range(7)]
    txs = [tx_item(days_ago(1), to=a) for a in addrs]
    txs += [tx_item(days_ago(1), to=None), tx_item(days_ago(1), to="")]
    # Outside the 90 day window
    txs += [tx_item(days_ago(120), to=addrs[6]) for _ in range(5)]

    result = top_counterparties(txs, NOW)

    assert result == addrs[:5]
    assert len(set(result)) == len(result)
    assert all(r == r.lower() for r in result)


# ── Recent transactions ───────────────────────────────────────────────────────


def test_recent_transactions_keep_input_order_and_limit():
    txs = [tx_item(days_ago(i), hash=f"0x{i}") for i in range(30)]
    recent = recent_transactions(txs)
    assert [r.hash for r in recent] == [f"0x{i}" for i in range(25)]


def test_recent_transaction_projection():
    tx = tx_item(
        "2025-05-31T10:00:00Z", value="1500000000000000000", hash="0xfeed",
        to="0x4200000000000000000000000000000000000006",
    )
    [recent] = recent_transactions([tx])
    dumped = recent.model_dump(by_alias=True)

    assert dumped == {
        "hash": "0xfeed",
        "timestamp": "2025-05-31T10:00:00Z",
        "from": tx.from_address,
        "to": "0x4200000000000000000000000000000000000006",
        "method": "transfer",
        "value_native": 1.5,
    }


def test_tx_method_prefers_first_decoded_event():
    assert tx_method(tx_item(iso(NOW), methods=("Swap", "Transfer"), value="10")) == "Swap"
    assert tx_method(tx_item(iso(NOW), methods=(None,), value="10")) == "transfer"
    assert tx_method(tx_item(iso(NOW), value="0")) == "call"
    assert tx_method(tx_item(iso(NOW), value="garbage")) == "call"


# ── Notes ─────────────────────────────────────────────────────────────────────


def test_dormant_wallet_scenario():
    summary = summarize([native_item("2000000000000000000")], [], NOW)

    assert summary.native_balance == 2
    assert summary.tx_count_30d == 0
    assert summary.tx_count_90d == 0
    assert summary.notes == [NOTE_DORMANT]


def test_active_wallet_is_not_dormant():
    summary = summarize([native_item()], [tx_item(days_ago(2))], NOW)
    assert NOTE_DORMANT not in summary.notes


def test_high_gas_note():
    txs = [tx_item(days_ago(60), gas_price="300000000000", gas_spent="1000000")]
    summary = summarize([], txs, NOW)
    assert summary.gas_spent_90d == 0.3
    assert summary.notes == [NOTE_HIGH_GAS]


def test_notes_order():
    balances = [native_item()] + [token_item(f"T{i}") for i in range(26)]
    txs = [tx_item(days_ago(60), gas_price="300000000000", gas_spent="1000000")]
    summary = summarize(balances, txs, NOW)
    assert summary.notes == [NOTE_DORMANT, NOTE_HIGH_GAS, NOTE_AIRDROP_HUNTER]


# ── Whole summary ─────────────────────────────────────────────────────────────


def test_top_contracts_always_empty():
    summary = summarize([native_item()], [tx_item(days_ago(1))], NOW)
    assert summary.top_contracts == []


def test_summarize_is_idempotent():
    balances = [native_item(), token_item("USDC", usd=10.0), token_item("DAI", usd=None)]
    txs = [
        tx_item(days_ago(1), gas_price="50000000000", gas_spent="21000", methods=("Swap",)),
        tx_item(days_ago(40), value="100"),
    ]

    first = summarize(balances, txs, NOW).model_dump_json(by_alias=True)
    second = summarize(balances, txs, NOW).model_dump_json(by_alias=True)

    assert first == second


def test_empty_inputs():
    summary = summarize([], [], NOW)
    assert summary.native_balance == 0
    assert summary.token_holdings == []
    assert summary.top_counterparties == []
    assert summary.recent_txs == []
    assert summary.notes == []


def test_huge_gas_values_count_as_zero():
    txs = [tx_item(iso(NOW), gas_price="9" * 200, gas_spent="9" * 200)]

    summary = summarize([], txs, NOW)

    assert summary.tx_count_30d == 1
    assert summary.gas_spent_30d == 0
    assert summary.gas_spent_90d == 0
