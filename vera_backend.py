import atexit
import os

from vera import create_app
from vera.extensions import get_stats

app = create_app()


def _shutdown():
    with app.app_context():
        get_stats().shutdown()


atexit.register(_shutdown)

if __name__ == '__main__':
    # SSE needs one worker thread per open stream
    app.run(
        debug=app.config.get("DEBUG", False),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 3000)),
        threaded=True,
        use_reloader=False,
    )
