import asyncio
from typing import Optional

import httpx

from config import COVALENT_BASE_URL
from errors import UpstreamError
from models import BalanceItem, DecodedEvent, TransactionItem
from utils import parse_float, parse_int

# Single page only
TX_PAGE_SIZE = 200


# ── Payload normalization ─────────────────────────────────────────────────────


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _amount_str(value) -> str:
    """Integer amount as a decimal string; malformed values become "0"."""
    if value is None:
        return "0"
    return str(parse_int(value))


def _items(payload) -> list[dict]:
    if not isinstance(payload, dict):
        return []
    data = payload.get("data") or {}
    items = data.get("items") if isinstance(data, dict) else None
    return [i for i in (items or []) if isinstance(i, dict)]


def parse_balance_item(raw: dict) -> BalanceItem:
    decimals = raw.get("contract_decimals")
    if decimals is not None:
        decimals = parse_int(decimals)
        if decimals < 0:
            decimals = None

    quote = raw.get("quote")
    return BalanceItem(
        contract_address=_optional_str(raw.get("contract_address")),
        is_native_token=bool(raw.get("native_token")),
        asset_type=raw.get("type") or "",
        decimals=decimals,
        raw_balance=_amount_str(raw.get("balance")),
        ticker_symbol=raw.get("contract_ticker_symbol") or "",
        quote_value=parse_float(quote) if quote is not None else None,
    )


def parse_transaction_item(raw: dict) -> TransactionItem:
    events = []
    for ev in raw.get("log_events") or []:
        decoded = ev.get("decoded") if isinstance(ev, dict) else None
        name = decoded.get("name") if isinstance(decoded, dict) else None
        events.append(DecodedEvent(method_name=_optional_str(name)))

    return TransactionItem(
        hash=raw.get("tx_hash") or "",
        to_address=_optional_str(raw.get("to_address")),
        from_address=_optional_str(raw.get("from_address")),
        gas_price=_amount_str(raw.get("gas_price")),
        gas_spent=_amount_str(raw.get("gas_spent")),
        value=_amount_str(raw.get("value")),
        timestamp=raw.get("block_signed_at") or "",
        decoded_events=events,
    )


# ── Client ────────────────────────────────────────────────────────────────────


class CovalentClient:
    """Covalent (GoldRush) REST client for one address on one chain."""

    def __init__(
        self,
        api_key: str,
        base_url: str = COVALENT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Cache-Control": "no-cache",
            },
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _get(
        self, client: httpx.AsyncClient, path: str, error: str, params: Optional[dict] = None
    ) -> dict:
        resp = await client.get(path, params=params)
        if not resp.is_success:
            print(f"  [!] Covalent {path} returned {resp.status_code}")
            raise UpstreamError(error)
        return resp.json()

    # ── Balances ───────────────────────────────────────────────────────────

    async def get_balances(
        self, address: str, chain: int, client: httpx.AsyncClient
    ) -> list[BalanceItem]:
        data = await self._get(
            client, f"/v1/{chain}/address/{address}/balances_v2/", "Balances error"
        )
        return [parse_balance_item(i) for i in _items(data)]

    # ── Transactions ───────────────────────────────────────────────────────

    async def get_transactions(
        self, address: str, chain: int, client: httpx.AsyncClient,
        page_size: int = TX_PAGE_SIZE,
    ) -> list[TransactionItem]:
        data = await self._get(
            client,
            f"/v1/{chain}/address/{address}/transactions_v3/",
            "Tx error",
            params={"page-size": page_size},
        )
        return [parse_transaction_item(i) for i in _items(data)]

    # ── Both at once ───────────────────────────────────────────────────────

    async def fetch_wallet(
        self, address: str, chain: int
    ) -> tuple[list[BalanceItem], list[TransactionItem]]:
        """Fetch balances and transactions concurrently. Either failure fails both."""
        async with self._client() as client:
            balances, transactions = await asyncio.gather(
                self.get_balances(address, chain, client),
                self.get_transactions(address, chain, client),
                return_exceptions=True,
            )

        # Balances failure is reported first
        for result in (balances, transactions):
            if isinstance(result, BaseException):
                raise result
        return balances, transactions
