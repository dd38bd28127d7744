from __future__ import annotations

_DASHBOARD_TEMPLATE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>ISS Location Dashboard</title>
    <style>
      body { font-family: sans-serif; max-width: 900px; margin: 24px auto; padding: 0 12px; background: #0f1420; color: #eaeaea; }
      .status { font-size: 13px; color: #9aa4b2; }
      .status.live { color: #4cd787; }
      .location-item { border: 1px solid #263042; border-radius: 8px; padding: 10px 12px; margin-top: 8px; }
      .location-header { display: flex; justify-content: space-between; font-weight: bold; }
      .detail-label { color: #9aa4b2; margin-right: 4px; }
      .detail-value { margin-right: 16px; }
      .empty-state { color: #666; margin-top: 16px; }
    </style>
  </head>
  <body>
    <h1>ISS Location</h1>
    <p id="status" class="status">connecting...</p>
    <div id="locations"><p class="empty-state">Waiting for the first position...</p></div>

    <script>
      const CAPACITY = __CAPACITY__;
      const RECONNECT_DELAY_MS = __RECONNECT_DELAY_MS__;
      const WS_PATH = "__WS_PATH__";

      function span(className, text) {
        const el = document.createElement("span");
        el.className = className;
        el.textContent = text;
        return el;
      }

      function renderLocation(location) {
        const item = document.createElement("div");
        item.className = "location-item";
        const header = document.createElement("div");
        header.className = "location-header";
        header.appendChild(span("title", "ISS Location"));
        header.appendChild(span("timestamp", location.eventTime));
        const details = document.createElement("div");
        details.appendChild(span("detail-label", "Latitude:"));
        details.appendChild(span("detail-value", Number(location.latitude).toFixed(4) + "\\u00b0"));
        details.appendChild(span("detail-label", "Longitude:"));
        details.appendChild(span("detail-value", Number(location.longitude).toFixed(4) + "\\u00b0"));
        item.appendChild(header);
        item.appendChild(details);
        return item;
      }

      function addLocation(location) {
        const container = document.getElementById("locations");
        const emptyState = container.querySelector(".empty-state");
        if (emptyState) emptyState.remove();
        container.insertBefore(renderLocation(location), container.firstChild);
        const items = container.querySelectorAll(".location-item");
        if (items.length > CAPACITY) items[items.length - 1].remove();
      }

      function setStatus(text, live) {
        const status = document.getElementById("status");
        status.textContent = text;
        status.className = live ? "status live" : "status";
      }

      function connect() {
        const scheme = window.location.protocol === "https:" ? "wss://" : "ws://";
        const ws = new WebSocket(scheme + window.location.host + WS_PATH);
        ws.onopen = () => setStatus("live", true);
        ws.onmessage = (event) => {
          try { addLocation(JSON.parse(event.data)); } catch (err) { console.error("bad frame", err); }
        };
        ws.onclose = () => {
          setStatus("disconnected, reconnecting...", false);
          setTimeout(connect, RECONNECT_DELAY_MS);
        };
      }

      connect();
    </script>
  </body>
</html>
"""


def render_dashboard(capacity: int, reconnect_delay_seconds: float, ws_path: str) -> str:
    return (
        _DASHBOARD_TEMPLATE.replace("__CAPACITY__", str(int(capacity)))
        .replace("__RECONNECT_DELAY_MS__", str(int(reconnect_delay_seconds * 1000)))
        .replace("__WS_PATH__", ws_path)
    )
