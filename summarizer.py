"""
Wallet activity summarizer.

Pure transformation of normalized balance and transaction records into a
``Summary``. Nothing here touches the network or the clock: the reference
instant ``now`` is always passed in.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from models import BalanceItem, RecentTransaction, Summary, TokenHolding, TransactionItem
from utils import gas_cost_native, parse_int, parse_timestamp, raw_to_units, round6, wei_to_native

MAX_TOKEN_HOLDINGS = 20
MAX_COUNTERPARTIES = 5
MAX_RECENT_TXS = 25

HIGH_GAS_THRESHOLD = 0.25
AIRDROP_HUNTER_TOKEN_COUNT = 25

NOTE_DORMANT = "Dormant last 30d but holds balance."
NOTE_HIGH_GAS = "High gas usage last 90d."
NOTE_AIRDROP_HUNTER = "Many token holdings—possible airdrop hunter."


@dataclass(frozen=True)
class WindowStats:
    tx_count_30d: int = 0
    tx_count_90d: int = 0
    # Unrounded; rounding happens when the Summary is built.
    gas_spent_30d: float = 0.0
    gas_spent_90d: float = 0.0


def _aware(now: datetime) -> datetime:
    return now if now.tzinfo else now.replace(tzinfo=timezone.utc)


def _window_cutoffs(now: datetime) -> tuple[datetime, datetime]:
    now = _aware(now)
    return now - timedelta(days=30), now - timedelta(days=90)


# ── Balances ──────────────────────────────────────────────────────────────────


def find_native(balances: list[BalanceItem]) -> Optional[BalanceItem]:
    return next((b for b in balances if b.is_native), None)


def native_balance(balances: list[BalanceItem]) -> float:
    native = find_native(balances)
    if native is None:
        return 0.0
    return raw_to_units(native.raw_balance, native.decimals)


def rank_tokens(balances: list[BalanceItem]) -> tuple[list[TokenHolding], int]:
    """
    Non-native cryptocurrency holdings with a positive balance, highest USD
    estimate first (missing estimates rank as 0, ties keep input order).

    Returns the top holdings and the number of holdings before truncation.
    """
    tokens: list[TokenHolding] = []
    for b in balances:
        if b.asset_type != "cryptocurrency" or b.is_native_token:
            continue
        balance = raw_to_units(b.raw_balance, b.decimals)
        if balance <= 0:
            continue
        tokens.append(TokenHolding(
            symbol=b.ticker_symbol,
            balance=balance,
            usd_estimate=b.quote_value,
        ))

    # sort() is stable
    tokens.sort(key=lambda t: t.usd_estimate or 0, reverse=True)

    top = [
        t.model_copy(update={"balance": round6(t.balance)})
        for t in tokens[:MAX_TOKEN_HOLDINGS]
    ]
    return top, len(tokens)


# ── Transactions ──────────────────────────────────────────────────────────────


def windowed_activity(transactions: list[TransactionItem], now: datetime) -> WindowStats:
    cutoff30, cutoff90 = _window_cutoffs(now)
    count30 = count90 = 0
    gas30 = gas90 = 0.0

    for tx in transactions:
        ts = parse_timestamp(tx.timestamp)
        if ts is None or ts < cutoff90:
            continue
        gas = gas_cost_native(tx.gas_price, tx.gas_spent)
        count90 += 1
        gas90 += gas
        if ts >= cutoff30:
            count30 += 1
            gas30 += gas

    return WindowStats(
        tx_count_30d=count30,
        tx_count_90d=count90,
        gas_spent_30d=gas30,
        gas_spent_90d=gas90,
    )


def top_counterparties(
    transactions: list[TransactionItem], now: datetime, limit: int = MAX_COUNTERPARTIES
) -> list[str]:
    """Most frequent recipients over the last 90 days, first-seen order on ties."""
    _, cutoff90 = _window_cutoffs(now)
    counts: dict[str, int] = {}

    for tx in transactions:
        ts = parse_timestamp(tx.timestamp)
        if ts is None or ts < cutoff90:
            continue
        to = (tx.to_address or "").strip().lower()
        if to:
            counts[to] = counts.get(to, 0) + 1

    # dicts keep insertion order, so a stable sort breaks ties by first appearance
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [address for address, _ in ranked[:limit]]


def tx_method(tx: TransactionItem) -> str:
    if tx.decoded_events and tx.decoded_events[0].method_name:
        return tx.decoded_events[0].method_name
    return "transfer" if parse_int(tx.value) > 0 else "call"


def recent_transactions(
    transactions: list[TransactionItem], limit: int = MAX_RECENT_TXS
) -> list[RecentTransaction]:
    return [
        RecentTransaction(
            hash=tx.hash,
            timestamp=tx.timestamp,
            from_address=tx.from_address,
            to_address=tx.to_address,
            method=tx_method(tx),
            value_native=wei_to_native(tx.value),
        )
        for tx in transactions[:limit]
    ]


# ── Notes ─────────────────────────────────────────────────────────────────────


def heuristic_notes(native: float, stats: WindowStats, token_count: int) -> list[str]:
    notes: list[str] = []
    if stats.tx_count_30d == 0 and native > 0:
        notes.append(NOTE_DORMANT)
    if stats.gas_spent_90d > HIGH_GAS_THRESHOLD:
        notes.append(NOTE_HIGH_GAS)
    if token_count > AIRDROP_HUNTER_TOKEN_COUNT:
        notes.append(NOTE_AIRDROP_HUNTER)
    return notes


# ── Entry point ───────────────────────────────────────────────────────────────


def summarize(
    balances: list[BalanceItem], transactions: list[TransactionItem], now: datetime
) -> Summary:
    native = native_balance(balances)
    holdings, token_count = rank_tokens(balances)
    stats = windowed_activity(transactions, now)

    return Summary(
        native_balance=round6(native),
        token_holdings=holdings,
        tx_count_30d=stats.tx_count_30d,
        tx_count_90d=stats.tx_count_90d,
        gas_spent_30d=round6(stats.gas_spent_30d),
        gas_spent_90d=round6(stats.gas_spent_90d),
        top_counterparties=top_counterparties(transactions, now),
        top_contracts=[],
        recent_txs=recent_transactions(transactions),
        notes=heuristic_notes(native, stats, token_count),
    )
