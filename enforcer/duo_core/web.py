"""
Flask web layer — a thin view over StatusStore plus a front door to the
command channel. Request threads never poll Duolingo themselves.

  GET  /                 HTML/JS UI
  GET  /api/status       current SharedStatus as JSON
  POST /api/update_jwt   {"new_jwt": "..."} → actor rebuilds its client
  POST /api/force_poll   poll now, returns the fresh status
  GET  /healthz          liveness
"""

from concurrent.futures import TimeoutError as FutureTimeout

from flask import Flask, Response, jsonify, request

from .commands import ForcePoll, UpdateCredential
from .config import log
from .constants import APP_VERSION, COMMAND_TIMEOUT_SEC, JWT_UPDATED_OK, STATUS_REFRESH_MS
from .errors import ChannelError, EnforcerError


def _text_error(message, status=500):
    log.warning("Returning error in response: %s", message)
    return Response(message, status=status, mimetype="text/plain")


def create_app(store, channel, config=None):
    config = config or {}
    command_timeout = config.get("commandTimeoutSec", COMMAND_TIMEOUT_SEC)

    app = Flask(__name__)

    def send_and_wait(cmd):
        channel.send(cmd)
        return cmd.reply.result(timeout=command_timeout)

    @app.get("/")
    def index():
        html = UI_HTML.replace("__REFRESH_MS__", str(STATUS_REFRESH_MS))
        return Response(html, mimetype="text/html")

    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok", "version": APP_VERSION})

    @app.get("/api/status")
    def status():
        snap = store.snapshot()
        # Nothing fetched yet and the last attempt failed: report it like a failed fetch
        if not store.has_data and snap.last_error and snap.last_error != JWT_UPDATED_OK:
            return _text_error(f"Error fetching duolingo status: {snap.last_error}")
        return jsonify(snap.to_dict())

    @app.post("/api/update_jwt")
    def update_jwt():
        body = request.get_json(silent=True)
        new_jwt = body.get("new_jwt") if isinstance(body, dict) else None
        if not isinstance(new_jwt, str):
            return _text_error("Expected JSON body {\"new_jwt\": string}", status=400)

        try:
            send_and_wait(UpdateCredential(new_jwt.strip()))
        except ChannelError as e:
            return _text_error(f"Failed to send command: {e}")
        except FutureTimeout:
            return _text_error("Timed out waiting for JWT update")
        except EnforcerError as e:
            return _text_error(f"Failed to update JWT: {e}")
        return Response(status=200)

    @app.post("/api/force_poll")
    def force_poll():
        try:
            snap = send_and_wait(ForcePoll())
        except ChannelError as e:
            return _text_error(f"Failed to send command: {e}")
        except FutureTimeout:
            return _text_error("Timed out waiting for poll")
        return jsonify(snap.to_dict())

    return app


UI_HTML = r"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>Duolingo Enforcer</title>
  <style>
    body { font-family: sans-serif; margin: 1em; }
    .error { color: red; }
    .note { color: #666; }
    .blocked { color: red; font-size: 20px; }
    .unblocked { color: green; font-size: 20px; }
  </style>
</head>
<body>
  <h1>Duolingo Enforcer</h1>
  <div>
    <button id="refreshBtn">Refresh now</button>
    <div style="margin-top:1em;">
      <input id="jwtBox" placeholder="New JWT..." style="width:300px;" />
      <button id="jwtBtn">Update JWT</button>
    </div>
  </div>
  <hr/>
  <div id="statusArea">Loading status...</div>
  <div id="lastError" class="note"></div>
  <div id="errorArea"></div>

  <script>
    async function call(url, options) {
      const resp = await fetch(url, options);
      if (!resp.ok) {
        throw new Error(await resp.text());
      }
      return resp;
    }

    async function fetchStatus() {
      try {
        const resp = await call("/api/status");
        renderStatus(await resp.json());
        clearError();
      } catch (e) {
        showError(e);
      }
    }

    async function forcePoll() {
      try {
        const resp = await call("/api/force_poll", { method: "POST" });
        renderStatus(await resp.json());
        clearError();
      } catch (e) {
        showError(e);
      }
    }

    async function updateJwt() {
      const jwt = document.getElementById("jwtBox").value;
      try {
        await call("/api/update_jwt", {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify({ new_jwt: jwt }),
        });
        document.getElementById("jwtBox").value = "";
        fetchStatus();
      } catch (e) {
        showError(e);
      }
    }

    function renderStatus(data) {
      const { xp_goal, xp_today, lessons_today, blocked, last_error } = data;
      const label = blocked ? "BLOCKED!" : "UNBLOCKED!";
      let html = `<div class="${blocked ? "blocked" : "unblocked"}">` +
                 `${label} (XP: ${xp_today}/${xp_goal})</div>`;

      if (lessons_today && lessons_today.length > 0) {
        html += "<h3>Recent Lessons</h3>";
        const byDay = {};
        for (const ls of lessons_today) {
          const dt = new Date(ls.time * 1000);
          const key = new Date(dt.getFullYear(), dt.getMonth(), dt.getDate()).getTime();
          (byDay[key] = byDay[key] || []).push(ls);
        }
        const days = Object.keys(byDay).map(Number).sort((a, b) => b - a);
        for (const day of days) {
          html += `<h4>${new Date(day).toLocaleDateString()}</h4>`;
          for (const it of byDay[day]) {
            const t = new Date(it.time * 1000).toLocaleTimeString();
            html += `<div>Time: ${t}, XP: ${it.xp}</div>`;
          }
        }
      }
      document.getElementById("statusArea").innerHTML = html;
      document.getElementById("lastError").innerText = last_error ? `Last message: ${last_error}` : "";
    }

    function showError(err) {
      document.getElementById("errorArea").innerHTML = "";
      const div = document.createElement("div");
      div.className = "error";
      div.innerText = String(err);
      document.getElementById("errorArea").appendChild(div);
    }

    function clearError() {
      document.getElementById("errorArea").innerHTML = "";
    }

    window.onload = () => {
      fetchStatus();
      setInterval(fetchStatus, __REFRESH_MS__);
      document.getElementById("refreshBtn").onclick = forcePoll;
      document.getElementById("jwtBtn").onclick = updateJwt;
    };
  </script>
</body>
</html>
"""
