import os
from dataclasses import dataclass

# Base mainnet
DEFAULT_CHAIN_ID = 8453
COVALENT_BASE_URL = "https://api.covalenthq.com"

# Chains offered by the web page selector
SELECTABLE_CHAINS: dict[int, str] = {
    8453: "Base",
    43114: "Avalanche C-Chain",
    1: "Ethereum",
    137: "Polygon",
    56: "BSC",
}


@dataclass(frozen=True)
class Settings:
    covalent_api_key: str = ""
    default_chain_id: int = DEFAULT_CHAIN_ID
    covalent_base_url: str = COVALENT_BASE_URL
    covalent_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment (call load_dotenv() first)."""
        return cls(
            covalent_api_key=os.getenv("COVALENT_API_KEY", "").strip(),
            default_chain_id=int(os.getenv("DEFAULT_CHAIN_ID", str(DEFAULT_CHAIN_ID))),
            covalent_base_url=os.getenv("COVALENT_BASE_URL", COVALENT_BASE_URL).rstrip("/"),
            covalent_timeout=float(os.getenv("COVALENT_TIMEOUT", "30")),
        )
