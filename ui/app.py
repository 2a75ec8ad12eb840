from __future__ import annotations

import logging
import os
import secrets
import threading
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from taskpulse.dashboard import OFFLINE_MESSAGE

from taskpulse import (
    DashboardView,
    Notification,
    StateSaver,
    StateStore,
    StatsCache,
    UndoAction,
    UserState,
    VisibilityController,
    build_dashboard,
    create_task,
    delete_task as remove_task,
    find_task,
    load_config,
    load_user_state,
    log_dir,
    now_local,
    save_user_state,
    setup_logging,
    update_task as edit_task,
    workspace_root as _workspace_root,
)

logger = logging.getLogger("taskpulse.ui")


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


# ── Notification presenter ────────────────────────────────────


class WebNotifier:
    """Keeps undo actions reachable by token until the toast would have expired."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._pending: dict[str, tuple[UndoAction, float]] = {}
        self.last: tuple[str, Notification] | None = None

    def notify(self, notification: Notification) -> None:
        self._expire()
        token = uuid.uuid4().hex
        if notification.action is not None:
            self._pending[token] = (notification.action, time.monotonic() + self.timeout)
        self.last = (token, notification)

    def _expire(self) -> None:
        now = time.monotonic()
        for token in [t for t, (_, deadline) in self._pending.items() if deadline <= now]:
            del self._pending[token]

    def take(self, token: str) -> UndoAction | None:
        self._expire()
        entry = self._pending.pop(token, None)
        return entry[0] if entry else None


class Session:
    """One workspace's live state: store, controller, stats cache and toasts."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.lock = threading.Lock()
        self.store = StateStore(load_user_state(root))
        self.notifier = WebNotifier(load_config(root).notification_timeout)
        self.controller = VisibilityController(self.store, self.notifier)
        self.cache = StatsCache()
        self.saver = StateSaver(self.store, lambda state: save_user_state(state, self.root))
        self.save_error: str | None = None
        self.store.subscribe(self._persist)

    def _persist(self, previous: UserState, new: UserState) -> None:
        try:
            self.saver.flush()
        except OSError as e:
            logger.error("Could not save %s: %s", self.root, e)
            self.save_error = str(e)
        else:
            self.save_error = None

    def saved(self) -> dict[str, Any]:
        """Save outcome of the last change, merged into mutation responses."""
        if self.save_error is None:
            return {"saved": True}
        return {"saved": False, "saveError": self.save_error}


_sessions: dict[Path, Session] = {}
_sessions_lock = threading.Lock()


def get_session() -> Session:
    root = _workspace_root()
    with _sessions_lock:
        session = _sessions.get(root)
        if session is None:
            try:
                session = Session(root)
            except ValueError as e:
                raise HTTPException(status_code=500, detail=str(e))
            _sessions[root] = session
        return session


def reset_sessions() -> None:
    """Forget cached workspace sessions (state is re-read from disk next time)."""
    with _sessions_lock:
        _sessions.clear()


# ── Auth ──────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    root = _workspace_root()
    setup_logging(log_dir=log_dir(root), console_level=load_config(root).log_level)
    logger.info("Serving workspace %s", root)
    yield


app = FastAPI(title="TaskPulse UI", version="0.1.0", lifespan=lifespan)

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("TASKPULSE_USERNAME", "")
    expected_password = os.environ.get("TASKPULSE_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Dashboard ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


def _view(session: Session, online: bool, compact: bool) -> DashboardView:
    return build_dashboard(
        session.store.snapshot,
        now_local(session.root),
        cache=session.cache,
        online=online,
        compact=compact,
    )


@app.get("/api/dashboard")
def api_dashboard(
    online: bool = True,
    compact: bool = False,
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """Derived dashboard state for the current moment."""
    return _view(session, online, compact).to_dict()


@app.get("/", response_class=HTMLResponse)
def index(
    compact: bool = False,
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> HTMLResponse:
    view = _view(session, True, compact)
    snapshot = session.store.snapshot

    stats_html = ""
    if view.show_stats_panel:
        due_html = ""
        if view.due_today_text:
            due_html = f'<div class="muted">\U0001f4c5 Tasks due today: <span translate="no">{_escape(view.due_today_text)}</span></div>'
        stats_html = f"""
    <section class="card{' glow' if view.glow else ''}" id="stats">
      <button class="close" title="Hide progress" onclick="hideProgress()">✕</button>
      <div class="pct{' glow' if view.percentage_glow else ''}">{view.percentage_label}</div>
      <progress max="100" value="{view.stats.completed_percentage:.1f}" aria-label="Progress"></progress>
      <h2>{_escape(view.count_header)}</h2>
      <div>{_escape(view.motivation)}</div>
      {due_html}
    </section>"""

    rows = []
    for t in snapshot.tasks:
        rows.append(
            f'<li class="{"done" if t.done else ""}"><label>'
            f'<input type="checkbox" data-id="{_escape(t.id)}" {"checked" if t.done else ""} onchange="setDone(this.dataset.id, this.checked)" /> '
            f'{_escape(t.name)}</label>'
            f'{f" <span class=muted>{_escape(str(t.deadline))}</span>" if t.deadline else ""}</li>'
        )

    add_html = ""
    if view.show_add_button:
        add_html = f"""
    <form class="add{' pulse' if view.animate_add_button else ''}" onsubmit="addTask(event)">
      <input id="name" placeholder="Task name" />
      <input id="deadline" type="datetime-local" />
      <button type="submit">{_escape(view.add_button_label)}</button>
    </form>"""

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>TaskPulse</title>
  <style>
    body {{ font-family: system-ui, sans-serif; background: #101418; color: #e8eaed; margin: 0; }}
    .container {{ max-width: 720px; margin: 0 auto; padding: 16px; }}
    .card {{ position: relative; border: 1px solid #2a3038; border-radius: 12px; padding: 16px; margin: 12px 0; }}
    .card.glow {{ box-shadow: 0 0 12px #7c4dff88; }}
    .pct {{ font-size: 24px; font-weight: 600; }}
    .pct.glow {{ text-shadow: 0 0 8px #fff; }}
    .close {{ position: absolute; top: 8px; right: 8px; }}
    .muted {{ opacity: .8; }}
    .done {{ text-decoration: line-through; opacity: .6; }}
    #offline, #toast {{ display: none; padding: 8px; border-radius: 8px; background: #333; }}
    .pulse button {{ animation: pulse 1.5s infinite; }}
    @keyframes pulse {{ 50% {{ transform: scale(1.08); }} }}
  </style>
</head>
<body>
  <div class="container">
    <h1>\U0001f44b {_escape(view.greeting)}{f', <span translate="no">{_escape(snapshot.name)}</span>' if snapshot.name.strip() else ''}</h1>
    <div id="offline">{_escape(OFFLINE_MESSAGE)}</div>
    {stats_html}
    <section class="card">
      <ul id="tasks">{''.join(rows) if rows else '<li class="muted">No tasks yet.</li>'}</ul>
    </section>
    {add_html}
    <div id="toast"></div>
  </div>
  <script>
    const offline = document.getElementById("offline");
    const sync = () => {{ offline.style.display = navigator.onLine ? "none" : "block"; }};
    window.addEventListener("online", sync); window.addEventListener("offline", sync); sync();
    async function post(url, body, method) {{
      const r = await fetch(url, {{ method: method || "POST", headers: {{ "Content-Type": "application/json" }}, body: JSON.stringify(body || {{}}) }});
      return r.json();
    }}
    async function hideProgress() {{
      const res = await post("/api/progress-bar/hide");
      document.getElementById("stats").remove();
      const toast = document.getElementById("toast");
      toast.innerHTML = res.message + ' <button onclick="undo(\\'' + res.undoToken + '\\')">' + res.actionLabel + '</button>';
      toast.style.display = "block";
      setTimeout(() => {{ toast.style.display = "none"; }}, res.timeout * 1000);
    }}
    async function undo(token) {{ await post("/api/undo/" + token); location.reload(); }}
    async function setDone(id, done) {{ await post("/api/tasks/" + encodeURIComponent(id), {{ done: done }}, "PUT"); location.reload(); }}
    async function addTask(ev) {{
      ev.preventDefault();
      const body = {{ name: document.getElementById("name").value }};
      const dl = document.getElementById("deadline").value;
      if (dl) body.deadline = dl;
      await post("/api/tasks", body); location.reload();
    }}
  </script>
</body>
</html>"""
    return HTMLResponse(html)


# ── Progress bar visibility ───────────────────────────────────

@app.post("/api/progress-bar/hide")
def api_hide_progress(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    """Hide the stats panel; the response carries a token for the undo action."""
    with session.lock:
        notification = session.controller.hide()
        token = None
        if session.notifier.last is not None and session.notifier.last[1] is notification:
            token = session.notifier.last[0]
    return {
        "ok": True,
        "showProgressBar": session.controller.is_visible,
        "message": notification.message,
        "actionLabel": notification.action.label if notification.action else None,
        "undoToken": token,
        "timeout": session.notifier.timeout,
        **session.saved(),
    }


@app.post("/api/progress-bar/show")
def api_show_progress(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    with session.lock:
        session.controller.show()
    return {"ok": True, "showProgressBar": session.controller.is_visible, **session.saved()}


@app.post("/api/undo/{token}")
def api_undo(token: str, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    """Run the undo attached to an earlier notification, once."""
    with session.lock:
        action = session.notifier.take(token)
        if action is None:
            raise HTTPException(status_code=404, detail="Undo no longer available")
        if not action():
            raise HTTPException(status_code=409, detail="Undo already applied")
    return {"ok": True, "showProgressBar": session.controller.is_visible, **session.saved()}


# ── State & tasks ─────────────────────────────────────────────

@app.get("/api/state")
def api_get_state(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    """Full user state dump."""
    return session.store.snapshot.to_dict()


@app.get("/api/tasks")
def api_list_tasks(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    return {"tasks": [t.to_dict() for t in session.store.snapshot.tasks]}


@app.post("/api/tasks")
def api_create_task(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """Create a new task."""
    with session.lock:
        new_state, task, errors = create_task(session.store.snapshot, payload)
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
        session.store.update(new_state)
    return {"ok": True, "task": task.to_dict(), **session.saved()}


@app.put("/api/tasks/{task_id}")
def api_update_task(
    task_id: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """Update a task (e.g. ``{"done": true}``)."""
    with session.lock:
        if find_task(session.store.snapshot, task_id) is None:
            raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
        new_state, updated, errors = edit_task(session.store.snapshot, task_id, payload)
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))
        session.store.update(new_state)
    return {"ok": True, "task": updated.to_dict(), **session.saved()}


@app.delete("/api/tasks/{task_id}")
def api_delete_task(task_id: str, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    with session.lock:
        new_state, deleted = remove_task(session.store.snapshot, task_id)
        if not deleted:
            raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
        session.store.update(new_state)
    return {"ok": True, "task_id": task_id, **session.saved()}


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    import uvicorn

    host = os.environ.get("TASKPULSE_HOST", "127.0.0.1")
    port = int(os.environ.get("TASKPULSE_PORT", "8787"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
