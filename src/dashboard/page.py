"""Server-side render of the dashboard page."""

from __future__ import annotations

import html
from string import Template
from urllib.parse import quote

from src.relay.state import RelayState

QR_IMAGE_SERVICE = "https://api.qrserver.com/v1/create-qr-code/?size=300x300&data="

_PAGE = Template("""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Chat Relay Dashboard</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif;
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      min-height: 100vh;
      padding: 20px;
    }
    .container { max-width: 800px; margin: 0 auto; }
    .card {
      background: white;
      border-radius: 12px;
      padding: 24px;
      margin-bottom: 20px;
      box-shadow: 0 4px 6px rgba(0,0,0,0.1);
    }
    h1 { color: #333; margin-bottom: 8px; font-size: 28px; }
    h2 { margin-bottom: 16px; }
    .status { display: flex; align-items: center; gap: 8px; font-size: 18px; margin: 16px 0; }
    .status-dot { width: 12px; height: 12px; border-radius: 50%; background: #10b981; }
    .stats-grid {
      display: grid;
      grid-template-columns: repeat(auto-fit, minmax(150px, 1fr));
      gap: 16px;
      margin: 20px 0;
    }
    .stat-item { text-align: center; padding: 16px; background: #f3f4f6; border-radius: 8px; }
    .stat-number { font-size: 32px; font-weight: bold; color: #667eea; }
    .stat-label { color: #6b7280; font-size: 14px; margin-top: 4px; }
    .buttons { display: flex; gap: 12px; flex-wrap: wrap; }
    button {
      padding: 12px 24px; border: none; border-radius: 8px;
      font-size: 16px; cursor: pointer; font-weight: 500; color: white;
    }
    .btn-primary { background: #667eea; }
    .btn-success { background: #10b981; }
    .logs {
      background: #1e293b; color: #10b981; padding: 16px; border-radius: 8px;
      height: 300px; overflow-y: auto;
      font-family: 'Courier New', monospace; font-size: 13px; line-height: 1.6;
    }
    .log-entry { margin-bottom: 4px; }
    .qr-container { text-align: center; padding: 20px; }
    .qr-container img { max-width: 100%; height: auto; }
  </style>
</head>
<body>
  <div class="container">
    <div class="card">
      <h1>🤖 Chat Relay Dashboard</h1>
      <div class="status">
        <span class="status-dot"></span>
        <span id="status-text">$status_text</span>
      </div>
      <p style="color: #6b7280;">Uptime: <span id="uptime">$uptime</span></p>
    </div>
    <div class="card">
      <h2>📊 Statistics</h2>
      <div class="stats-grid">
        <div class="stat-item">
          <div class="stat-number" id="received">$messages_received</div>
          <div class="stat-label">Messages Received</div>
        </div>
        <div class="stat-item">
          <div class="stat-number" id="sent">$replies_sent</div>
          <div class="stat-label">Replies Sent</div>
        </div>
        <div class="stat-item">
          <div class="stat-number" id="errors">$errors</div>
          <div class="stat-label">Errors</div>
        </div>
      </div>
    </div>
    <div class="card">
      <h2>⚙️ Controls</h2>
      <div class="buttons">
        <button class="btn-success" onclick="location.reload()">🔄 Refresh</button>
        <button class="btn-primary" onclick="clearLogs()">🗑️ Clear Logs</button>
      </div>
    </div>
    <div class="card">
      <h2>📝 Live Logs</h2>
      <div class="logs" id="logs">$log_entries</div>
    </div>
    <div class="card" id="qr-section" style="display: $qr_display;">
      <h2>📱 Scan QR Code</h2>
      <div class="qr-container">
        <img id="qr-image" src="$qr_src" alt="QR Code">
      </div>
    </div>
  </div>
  <script>
    const QR_SERVICE = "$qr_service";
    function statusLabel(status) {
      if (status.ready) return 'Running ✅';
      if (status.authenticated) return 'Authenticated 🔐';
      return 'Connecting...';
    }
    function formatUptime(startTime) {
      const uptime = Math.floor((Date.now() - startTime) / 1000);
      return Math.floor(uptime / 3600) + 'h ' + Math.floor((uptime % 3600) / 60) + 'm';
    }
    const handlers = {
      log: (line) => {
        const logsDiv = document.getElementById('logs');
        const entry = document.createElement('div');
        entry.className = 'log-entry';
        entry.textContent = line;
        logsDiv.appendChild(entry);
        logsDiv.scrollTop = logsDiv.scrollHeight;
      },
      stats: (stats) => {
        document.getElementById('received').textContent = stats.messagesReceived;
        document.getElementById('sent').textContent = stats.repliesSent;
        document.getElementById('errors').textContent = stats.errors;
      },
      status: (status) => {
        document.getElementById('status-text').textContent = statusLabel(status);
        if (status.authenticated) document.getElementById('qr-section').style.display = 'none';
      },
      qr: (code) => {
        document.getElementById('qr-section').style.display = 'block';
        document.getElementById('qr-image').src = QR_SERVICE + encodeURIComponent(code);
      },
    };
    function connect() {
      const scheme = location.protocol === 'https:' ? 'wss://' : 'ws://';
      const socket = new WebSocket(scheme + location.host + '/ws');
      socket.onmessage = (msg) => {
        const payload = JSON.parse(msg.data);
        const handler = handlers[payload.event];
        if (handler) handler(payload.data);
      };
      socket.onclose = () => setTimeout(connect, 2000);
    }
    function clearLogs() {
      document.getElementById('logs').innerHTML = '';
    }
    connect();
    setInterval(() => {
      fetch('/api/stats')
        .then(r => r.json())
        .then(data => {
          document.getElementById('uptime').textContent = formatUptime(data.startTime);
        });
    }, 60000);
  </script>
</body>
</html>""")


def format_uptime(seconds: int) -> str:
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def status_text(ready: bool, authenticated: bool) -> str:
    if ready:
        return "Running ✅"
    if authenticated:
        return "Authenticated 🔐"
    return "Connecting..."


def render_dashboard(state: RelayState) -> str:
    """Render the page from the state as it is right now."""
    stats = state.stats
    connection = state.connection
    qr = state.pending_qr
    entries = "".join(
        f'<div class="log-entry">{html.escape(line)}</div>'
        for line in state.logs.snapshot()
    )
    return _PAGE.substitute(
        status_text=status_text(connection.ready, connection.authenticated),
        uptime=format_uptime(stats.uptime_seconds()),
        messages_received=stats.messages_received,
        replies_sent=stats.replies_sent,
        errors=stats.errors,
        log_entries=entries,
        qr_display="block" if qr else "none",
        qr_src=html.escape(QR_IMAGE_SERVICE + quote(qr, safe="")) if qr else "",
        qr_service=QR_IMAGE_SERVICE,
    )