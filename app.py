# -*- coding: utf-8 -*-
import logging
import os

from event_portal import config, create_app

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
)
logger = logging.getLogger(__name__)

app = create_app()

# --- Main Execution Block ---
if __name__ == '__main__':
    debug = os.environ.get("FLASK_DEBUG") == "1"
    if os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        logger.info(f"Starting event portal on port {config.PORT} (sheet backend: {config.SHEET_BACKEND}).")
    app.run(debug=debug, host='0.0.0.0', port=config.PORT)
