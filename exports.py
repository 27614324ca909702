import csv
import io
import json
from datetime import datetime

from config import SELECTABLE_CHAINS
from models import AnalyzeResponse
from utils import format_currency


def _chain_label(chain: int) -> str:
    name = SELECTABLE_CHAINS.get(chain)
    return f"{name} ({chain})" if name else str(chain)


def to_csv(result: AnalyzeResponse) -> bytes:
    """Export a wallet analysis to CSV."""
    out = io.StringIO()
    w = csv.writer(out)

    w.writerow(["WALLET ACTIVITY REPORT"])
    w.writerow(["Generated", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    w.writerow([])

    # ── Overview ──────────────────────────────────────────────────────
    w.writerow(["OVERVIEW"])
    w.writerow(["Address", result.address])
    w.writerow(["Chain", _chain_label(result.chain)])
    w.writerow(["Native Balance", f"{result.native_balance:.6f}"])
    w.writerow(["Transactions (30d)", result.tx_count_30d])
    w.writerow(["Transactions (90d)", result.tx_count_90d])
    w.writerow(["Gas Spent (30d)", f"{result.gas_spent_30d:.6f}"])
    w.writerow(["Gas Spent (90d)", f"{result.gas_spent_90d:.6f}"])
    w.writerow(["Notes", " · ".join(result.notes)])
    w.writerow([])

    # ── Counterparties ────────────────────────────────────────────────
    w.writerow(["TOP COUNTERPARTIES (90d)"])
    for rank, addr in enumerate(result.top_counterparties, 1):
        w.writerow([rank, addr])
    w.writerow([])

    # ── Tokens ────────────────────────────────────────────────────────
    w.writerow(["TOP TOKENS"])
    w.writerow(["Symbol", "Balance", "USD Estimate"])
    for t in result.token_holdings:
        w.writerow([t.symbol, f"{t.balance:.6f}", format_currency(t.usd_estimate)])
    w.writerow([])

    # ── Recent Transactions ───────────────────────────────────────────
    w.writerow(["RECENT TRANSACTIONS"])
    w.writerow(["Time", "From", "To", "Method", "Value (Native)", "Hash"])
    for tx in result.recent_txs:
        w.writerow([
            tx.timestamp, tx.from_address or "-", tx.to_address or "-",
            tx.method, f"{tx.value_native:.6f}", tx.hash,
        ])

    return out.getvalue().encode("utf-8")


def to_json(result: AnalyzeResponse) -> bytes:
    """Export a wallet analysis as formatted JSON."""
    return json.dumps(result.to_payload(), indent=2, ensure_ascii=False).encode("utf-8")


def to_excel(result: AnalyzeResponse) -> bytes:
    """Export a wallet analysis to a formatted Excel workbook."""
    import openpyxl
    from openpyxl.styles import Alignment, Font, PatternFill
    from openpyxl.utils import get_column_letter

    wb = openpyxl.Workbook()

    # ── Overview Sheet ────────────────────────────────────────────────
    ws = wb.active
    ws.title = "Overview"

    accent = PatternFill(start_color="6c5ce7", end_color="6c5ce7", fill_type="solid")
    dark = PatternFill(start_color="1a1a2e", end_color="1a1a2e", fill_type="solid")
    white_bold = Font(bold=True, color="FFFFFF")
    bold = Font(bold=True)

    ws.merge_cells("A1:D1")
    ws["A1"] = "Wallet Activity Report"
    ws["A1"].font = Font(bold=True, size=16, color="FFFFFF")
    ws["A1"].fill = accent
    ws["A1"].alignment = Alignment(horizontal="center")

    rows = [
        ("Address", result.address),
        ("Chain", _chain_label(result.chain)),
        ("Generated", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
        ("", ""),
        ("Native Balance", result.native_balance),
        ("Transactions (30d)", result.tx_count_30d),
        ("Transactions (90d)", result.tx_count_90d),
        ("Gas Spent (30d)", result.gas_spent_30d),
        ("Gas Spent (90d)", result.gas_spent_90d),
        ("Top Counterparties", ", ".join(result.top_counterparties) or "None"),
        ("Notes", " · ".join(result.notes) or "None"),
    ]
    for i, (label, value) in enumerate(rows, 3):
        ws[f"A{i}"] = label
        ws[f"A{i}"].font = bold
        ws[f"B{i}"] = value

    # ── Tables ────────────────────────────────────────────────────────
    def table(title: str, headers: list[str], data: list[list]):
        sheet = wb.create_sheet(title)
        for col, h in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=h)
            cell.font = white_bold
            cell.fill = dark
        for r, values in enumerate(data, 2):
            for col, value in enumerate(values, 1):
                sheet.cell(row=r, column=col, value=value)
        return sheet

    ws2 = table(
        "Tokens",
        ["Symbol", "Balance", "USD Estimate"],
        [[t.symbol, t.balance, t.usd_estimate] for t in result.token_holdings],
    )
    ws3 = table(
        "Recent Transactions",
        ["Time", "From", "To", "Method", "Value (Native)", "Hash"],
        [
            [tx.timestamp, tx.from_address or "-", tx.to_address or "-",
             tx.method, tx.value_native, tx.hash]
            for tx in result.recent_txs
        ],
    )

    # Auto-fit column widths
    for sheet in [ws, ws2, ws3]:
        for col in sheet.columns:
            max_len = max(len(str(cell.value or "")) for cell in col)
            sheet.column_dimensions[get_column_letter(col[0].column)].width = min(max_len + 3, 70)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
