#!/usr/bin/env python3
"""Entry point for the Zyprint printer bridge."""
import os
from zyprint import create_app

app = create_app(os.environ.get("FLASK_ENV", "default"))

if __name__ == "__main__":
    # Get host and port from environment or use defaults
    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_ENV", "default") == "development"

    print(f"Starting Zyprint bridge on http://{host}:{port}")
    # Reloader would open a second set of printer connections
    app.run(host=host, port=port, debug=debug, threaded=True, use_reloader=False)
