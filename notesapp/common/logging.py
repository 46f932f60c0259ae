# notesapp/common/logging.py
"""Logs JSON sur stdout.

Chaque requête produit une ligne ``http_request``; tout log émis pendant une
requête porte son request id et l'utilisateur authentifié (s'il y en a un).
"""
import logging, sys, time, uuid
from pythonjsonlogger.json import JsonFormatter
from flask import g, has_request_context, request

REQUEST_LOGGER = "notesapp.request"
# appelé en boucle par l'orchestrateur: DEBUG seulement
QUIET_PATHS = ("/healthz",)


def _current_user_id():
    user = g.get("current_user")
    return user.id if user is not None else None


class RequestContextFilter(logging.Filter):
    """Complète request_id / user_id sans écraser un ``extra`` explicite."""

    def filter(self, record):
        if has_request_context():
            if not hasattr(record, "request_id"):
                record.request_id = g.get("request_id", "-")
            if not hasattr(record, "user_id"):
                record.user_id = _current_user_id()
        return True


def setup_json_logging(app):
    # LOG_LEVEL sinon DEBUG en dev (app.debug), INFO ailleurs
    level = app.config.get("LOG_LEVEL") or (logging.DEBUG if app.debug else logging.INFO)
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s %(user_id)s "
        "%(method)s %(path)s %(endpoint)s %(status)s %(latency_ms)s"
    ))
    handler.addFilter(RequestContextFilter())
    root.addHandler(handler)


def register_request_logging(app):
    log = logging.getLogger(REQUEST_LOGGER)

    @app.before_request
    def _start_request():
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        g._start_time = time.perf_counter()

    @app.after_request
    def _log_request(resp):
        start = g.get("_start_time")
        latency = int((time.perf_counter() - start) * 1000) if start is not None else -1
        resp.headers.setdefault("X-Request-Id", g.get("request_id", "-"))

        log.log(
            logging.DEBUG if request.path in QUIET_PATHS else logging.INFO,
            "http_request",
            extra={
                "request_id": g.get("request_id", "-"),
                "user_id": _current_user_id(),
                "method": request.method,
                "path": request.path,
                "endpoint": request.endpoint,
                "status": resp.status_code,
                "latency_ms": latency,
            },
        )
        return resp
