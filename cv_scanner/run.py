# run.py
import logging
from cv_scanner.app import create_app, db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    try:
        app = create_app()
        with app.app_context():
            db.create_all()
        logger.info("Starting Flask server on http://127.0.0.1:8080")
        app.run(debug=False, host="127.0.0.1", port=8080)
    except Exception:
        logger.exception("Error starting Flask app")
        raise
