from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Provider Records (normalized at the Covalent boundary) ────────────────────


class BalanceItem(BaseModel):
    contract_address: Optional[str] = None
    is_native_token: bool = False
    asset_type: str = ""
    decimals: Optional[int] = Field(None, ge=0)
    raw_balance: str = "0"
    ticker_symbol: str = ""
    quote_value: Optional[float] = None

    @property
    def is_native(self) -> bool:
        return self.is_native_token or not self.contract_address


class DecodedEvent(BaseModel):
    method_name: Optional[str] = None


class TransactionItem(BaseModel):
    hash: str = ""
    to_address: Optional[str] = None
    from_address: Optional[str] = None
    gas_price: str = "0"
    gas_spent: str = "0"
    value: str = "0"
    timestamp: str = ""
    decoded_events: list[DecodedEvent] = []


# ── Summary ───────────────────────────────────────────────────────────────────


class TokenHolding(BaseModel):
    symbol: str
    balance: float
    usd_estimate: Optional[float] = None


class RecentTransaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hash: str
    timestamp: str
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    method: str
    value_native: float


class Summary(BaseModel):
    native_balance: float = 0.0
    token_holdings: list[TokenHolding] = []
    tx_count_30d: int = 0
    tx_count_90d: int = 0
    gas_spent_30d: float = 0.0
    gas_spent_90d: float = 0.0
    top_counterparties: list[str] = []
    # Reserved: always empty.
    top_contracts: list[str] = []
    recent_txs: list[RecentTransaction] = []
    notes: list[str] = []


# ── API Models ────────────────────────────────────────────────────────────────


class AnalyzeResponse(BaseModel):
    chain: int
    address: str
    native_balance: float = 0.0
    token_holdings: list[TokenHolding] = []
    tx_count_30d: int = 0
    tx_count_90d: int = 0
    gas_spent_30d: float = 0.0
    gas_spent_90d: float = 0.0
    top_counterparties: list[str] = []
    top_contracts: list[str] = []
    recent_txs: list[RecentTransaction] = []
    notes: list[str] = []

    @classmethod
    def from_summary(cls, chain: int, address: str, summary: Summary) -> "AnalyzeResponse":
        fields = {name: getattr(summary, name) for name in Summary.model_fields}
        return cls(chain=chain, address=address, **fields)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    version: str


class ChainInfo(BaseModel):
    chain_id: int
    name: str
    default: bool = False
