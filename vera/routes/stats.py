# vera/routes/stats.py
import logging

from flask import Blueprint, Response, current_app, jsonify

from ..errors import StoreError, StoreNotConfiguredError
from ..extensions import get_stats
from ..stats.hub import QueueSink

logger = logging.getLogger(__name__)

bp = Blueprint("stats", __name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@bp.get("/overview")
def overview():
    try:
        snapshot = get_stats().get_overview()
    except StoreNotConfiguredError as e:
        return jsonify({"error": e.message}), 500
    except StoreError as e:
        logger.error("Overview failed: %s", e.message)
        return jsonify({"error": e.message or "Failed to compute stats."}), 500
    except Exception:
        logger.exception("Overview failed")
        return jsonify({"error": "Failed to compute stats."}), 500
    return jsonify(snapshot.to_dict())


@bp.get("/stream")
def stream():
    service = get_stats()
    if not service.configured:
        return jsonify({"error": StoreNotConfiguredError().message}), 500

    keepalive = current_app.config["STREAM_KEEPALIVE_SECONDS"]
    sink = QueueSink(maxsize=current_app.config["STREAM_QUEUE_SIZE"])
    service.hub.subscribe(sink)
    service.ensure_live()

    def events():
        # runs until the client goes away; GeneratorExit lands in finally
        try:
            yield from sink.frames(keepalive)
        finally:
            service.hub.unsubscribe(sink)

    response = Response(events(), mimetype="text/event-stream", headers=SSE_HEADERS)
    # covers disconnects before the generator ever started
    response.call_on_close(lambda: service.hub.unsubscribe(sink))
    return response
