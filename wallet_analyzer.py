from datetime import datetime
from typing import Optional, Union

from config import Settings
from covalent import CovalentClient
from errors import ConfigurationError, InputValidationError
from models import AnalyzeResponse
from summarizer import summarize
from utils import is_evm_address, utc_now


class WalletAnalyzer:
    """Validates a request, fetches wallet data from Covalent and summarizes it."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[CovalentClient] = None):
        self.settings = settings or Settings.from_env()
        self.client = client

    def _covalent(self) -> CovalentClient:
        if self.client is not None:
            return self.client
        return CovalentClient(
            self.settings.covalent_api_key,
            base_url=self.settings.covalent_base_url,
            timeout=self.settings.covalent_timeout,
        )

    def resolve_chain(self, chain: Union[int, str, None]) -> int:
        if chain is None or (isinstance(chain, str) and not chain.strip()):
            return self.settings.default_chain_id
        try:
            chain_id = int(str(chain).strip())
        except ValueError:
            raise InputValidationError(f"Invalid chain id: {chain}")
        if chain_id <= 0:
            raise InputValidationError(f"Invalid chain id: {chain}")
        return chain_id

    async def analyze(
        self,
        address: str,
        chain: Union[int, str, None] = None,
        now: Optional[datetime] = None,
    ) -> AnalyzeResponse:
        address = (address or "").strip()
        if not is_evm_address(address):
            raise InputValidationError("Invalid address (use 0x…)")
        if not self.settings.covalent_api_key:
            raise ConfigurationError("Server missing COVALENT_API_KEY")

        chain_id = self.resolve_chain(chain)

        balances, transactions = await self._covalent().fetch_wallet(address, chain_id)

        summary = summarize(balances, transactions, now or utc_now())
        return AnalyzeResponse.from_summary(chain_id, address, summary)
