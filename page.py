INDEX_HTML = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Wallet Analyzer</title>
<style>
  body { font-family: system-ui, sans-serif; background: #f5f5f7; color: #111; margin: 0; }
  .container { max-width: 1000px; margin: 0 auto; padding: 24px; }
  .card { background: #fff; border-radius: 12px; padding: 16px; box-shadow: 0 1px 3px rgba(0,0,0,.08); }
  .row { display: flex; gap: 8px; }
  .input { flex: 1; padding: 8px 10px; border: 1px solid #ccc; border-radius: 8px; }
  .btn { padding: 8px 16px; border: 0; border-radius: 8px; background: #6c5ce7; color: #fff; cursor: pointer; }
  .btn:disabled { opacity: .5; cursor: default; }
  .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; margin-top: 16px; }
  .small { font-size: 14px; color: #444; }
  .table { width: 100%; border-collapse: collapse; font-size: 13px; }
  .table th, .table td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #eee; }
  .error { color: #b91c1c; margin-top: 10px; }
  .hidden { display: none; }
</style>
</head>
<body>
<div class="container">
  <div class="card" style="margin-bottom: 16px">
    <h1 style="margin: 0; font-size: 22px">Wallet Analyzer</h1>
    <p class="small" style="margin-top: 6px">Paste any EVM address. Default chain: <b>{default_chain_name}</b>.</p>
    <div class="row" style="margin-top: 12px">
      <input id="address" class="input" placeholder="0x… wallet address">
      <select id="chain" class="input" style="flex: 0 0 160px">{chain_options}</select>
      <button id="analyze" class="btn" disabled>Analyze</button>
    </div>
    <p id="error" class="error hidden"></p>
  </div>

  <div id="result" class="hidden">
    <div class="grid">
      <div class="card">
        <h3 style="margin-top: 0">Overview</h3>
        <ul id="overview" class="small" style="line-height: 1.8"></ul>
      </div>
      <div class="card">
        <h3 style="margin-top: 0">Top counterparties (90d)</h3>
        <ol id="counterparties" class="small" style="margin-top: 4px"></ol>
      </div>
    </div>
    <div class="card" style="margin-top: 16px">
      <h3 style="margin-top: 0">Top tokens</h3>
      <table class="table">
        <thead><tr><th>Symbol</th><th>Balance</th><th>USD est.</th></tr></thead>
        <tbody id="tokens"></tbody>
      </table>
    </div>
    <div class="card" style="margin-top: 16px">
      <h3 style="margin-top: 0">Recent transactions</h3>
      <div style="overflow-x: auto">
        <table class="table">
          <thead><tr><th>Time</th><th>From</th><th>To</th><th>Method</th><th>Value (native)</th><th>Hash</th></tr></thead>
          <tbody id="txs"></tbody>
        </table>
      </div>
    </div>
  </div>
</div>
<script>
const $ = (id) => document.getElementById(id);
const esc = (v) => String(v ?? "-").replace(/[&<>"]/g, (c) => ({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"}[c]));

$("address").addEventListener("input", () => { $("analyze").disabled = !$("address").value.trim(); });

$("analyze").addEventListener("click", async () => {
  const btn = $("analyze");
  btn.disabled = true; btn.textContent = "Analyzing…";
  $("error").classList.add("hidden"); $("result").classList.add("hidden");
  try {
    const qs = new URLSearchParams({ address: $("address").value.trim(), chain: $("chain").value });
    const res = await fetch(`/api/analyze?${qs}`, { cache: "no-store" });
    const data = await res.json();
    if (!res.ok) throw new Error(data.error || "Request failed");
    render(data);
  } catch (e) {
    $("error").textContent = e.message; $("error").classList.remove("hidden");
  } finally {
    btn.disabled = false; btn.textContent = "Analyze";
  }
});

function render(d) {
  const overview = [
    ["Address", d.address], ["Chain ID", d.chain], ["Native balance", d.native_balance],
    ["Tx (30d / 90d)", `${d.tx_count_30d} / ${d.tx_count_90d}`],
    ["Gas (30d / 90d)", `${d.gas_spent_30d} / ${d.gas_spent_90d}`],
  ];
  if (d.notes.length) overview.push(["Notes", d.notes.join(" · ")]);
  $("overview").innerHTML = overview.map(([k, v]) => `<li><b>${k}:</b> ${esc(v)}</li>`).join("");
  $("counterparties").innerHTML = d.top_counterparties.length
    ? d.top_counterparties.map((a) => `<li>${esc(a)}</li>`).join("")
    : "<li>None</li>";
  $("tokens").innerHTML = d.token_holdings
    .map((t) => `<tr><td>${esc(t.symbol)}</td><td>${esc(t.balance)}</td><td>${esc(t.usd_estimate)}</td></tr>`).join("");
  $("txs").innerHTML = d.recent_txs.map((t) => `<tr>
      <td>${esc(new Date(t.timestamp).toLocaleString())}</td><td>${esc(t.from)}</td><td>${esc(t.to)}</td>
      <td>${esc(t.method)}</td><td>${esc(t.value_native)}</td><td>${esc(t.hash.slice(0, 10))}…</td></tr>`).join("");
  $("result").classList.remove("hidden");
}
</script>
</body>
</html>
"""


def render_index(chains: dict[int, str], default_chain: int) -> str:
    if default_chain not in chains:
        chains = {default_chain: f"Chain {default_chain}", **chains}
    options = "".join(
        f'<option value="{chain_id}"{" selected" if chain_id == default_chain else ""}>{name}</option>'
        for chain_id, name in chains.items()
    )
    return (
        INDEX_HTML
        .replace("{chain_options}", options)
        .replace("{default_chain_name}", chains[default_chain])
    )
