import io
import os
from contextlib import asynccontextmanager
from typing import Literal, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from fastmcp import FastMCP

load_dotenv()

from config import SELECTABLE_CHAINS, Settings
from errors import AnalyzerError
from exports import to_csv, to_excel, to_json
from models import ChainInfo, ErrorResponse, HealthResponse
from page import render_index
from wallet_analyzer import WalletAnalyzer

VERSION = "1.0.0"
NO_STORE = {"Cache-Control": "no-store"}


# ── Analyzer ──────────────────────────────────────────────────────────────────

analyzer: WalletAnalyzer | None = None


def get_analyzer() -> WalletAnalyzer:
    global analyzer
    if analyzer is None:
        analyzer = WalletAnalyzer(Settings.from_env())
    return analyzer


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code, headers=NO_STORE)


# ── MCP Server (mounted at /mcp) ─────────────────────────────────────────────

mcp = FastMCP(
    name="Wallet Activity Analyzer",
    instructions=(
        "Summarizes recent activity of an EVM wallet on one chain using the Covalent API: "
        "native balance, top tokens, 30/90 day transaction counts and gas spend, "
        "top counterparties, recent transactions and heuristic notes."
    ),
)


async def analyze_wallet_mcp(address: str, chain: Optional[int] = None) -> dict:
    """
    Summarize an EVM wallet's activity on one chain.

    Args:
        address: 0x-prefixed 40 hex char wallet address.
        chain:   Numeric chain id (defaults to Base, 8453).

    Returns:
        The same payload as GET /api/analyze, or {"error": ...}.
    """
    try:
        result = await get_analyzer().analyze(address, chain)
    except Exception as e:
        return {"error": str(e)}
    return result.to_payload()


mcp.tool(analyze_wallet_mcp)

# Served at /mcp/ once mounted
mcp_app = mcp.http_app(path="/")


# ── Lifespan ──────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_analyzer().settings
    if not settings.covalent_api_key:
        print("  [!] COVALENT_API_KEY is not set; /api/analyze will return 500")
    async with mcp_app.lifespan(app):
        print(f"  Wallet Activity Analyzer ready (default chain {settings.default_chain_id})")
        yield
    print("  Shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Wallet Activity Analyzer",
    description=(
        "Fetches balances and transactions for an EVM address from Covalent and "
        "summarizes them: native balance, top tokens, 30/90 day activity and gas, "
        "top counterparties, recent transactions and heuristic notes.\n\n"
        "Exposes **REST** (`/api/analyze`), a web page (`/`) and **MCP** (`/mcp`)."
    ),
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/mcp", mcp_app)


@app.exception_handler(AnalyzerError)
async def analyzer_error_handler(request: Request, exc: AnalyzerError):
    return error_response(exc.status_code, exc.message)


# ── Info ──────────────────────────────────────────────────────────────────────


@app.get("/", response_class=HTMLResponse, tags=["Info"])
def index(wallets: WalletAnalyzer = Depends(get_analyzer)):
    return HTMLResponse(render_index(SELECTABLE_CHAINS, wallets.settings.default_chain_id))


@app.get("/info", tags=["Info"])
def info(request: Request):
    base = str(request.base_url).rstrip("/")
    return {
        "name": "Wallet Activity Analyzer",
        "version": VERSION,
        "endpoints": {
            "ui": f"{base}/",
            "docs": f"{base}/docs",
            "health": f"{base}/health",
            "chains": f"{base}/chains",
            "analyze": f"{base}/api/analyze",
            "mcp": f"{base}/mcp",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["Info"])
def health():
    return HealthResponse(status="ok", version=VERSION)


@app.get("/chains", response_model=list[ChainInfo], tags=["Info"])
def chains(wallets: WalletAnalyzer = Depends(get_analyzer)):
    default = wallets.settings.default_chain_id
    return [
        ChainInfo(chain_id=chain_id, name=name, default=chain_id == default)
        for chain_id, name in SELECTABLE_CHAINS.items()
    ]


# ── Core: Analyze Wallet ──────────────────────────────────────────────────────


@app.get("/api/analyze", tags=["Wallet"])
async def analyze_wallet(
    address: str = Query(default="", description="0x-prefixed 40 hex char address"),
    chain: Optional[str] = Query(default=None, description="Chain id (default 8453, Base)"),
    format: Literal["json", "csv", "excel"] = Query(
        default="json",
        description="Output format: json (default) | csv | excel",
    ),
    download: bool = Query(
        default=False,
        description="Return JSON as a pretty-printed file download",
    ),
    wallets: WalletAnalyzer = Depends(get_analyzer),
):
    """
    Summarize an EVM wallet's activity on one chain.

    - **400** invalid address
    - **500** server missing its Covalent credential
    - **502** Covalent answered with an error
    """
    try:
        result = await wallets.analyze(address, chain)
    except AnalyzerError:
        raise
    except Exception as e:
        print(f"  [!] analyze failed for {address}: {e}")
        return error_response(500, str(e) or "Server error")

    short = result.address[:12]

    if format == "csv":
        return StreamingResponse(
            content=io.BytesIO(to_csv(result)),
            media_type="text/csv",
            headers={
                **NO_STORE,
                "Content-Disposition": f'attachment; filename="wallet_{short}_{result.chain}.csv"',
            },
        )

    if format == "excel":
        return StreamingResponse(
            content=io.BytesIO(to_excel(result)),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={
                **NO_STORE,
                "Content-Disposition": f'attachment; filename="wallet_{short}_{result.chain}.xlsx"',
            },
        )

    if download:
        return StreamingResponse(
            content=io.BytesIO(to_json(result)),
            media_type="application/json",
            headers={
                **NO_STORE,
                "Content-Disposition": f'attachment; filename="wallet_{short}_{result.chain}.json"',
            },
        )

    return JSONResponse(result.to_payload(), headers=NO_STORE)


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("APP_ENV", "development") == "development",
    )
