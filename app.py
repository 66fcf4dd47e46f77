#!/usr/bin/env python3
"""
Flask application entry point for development.
This file serves as the main entry point for the Flask application.
"""

from cv_scanner.app import create_app, db


# Create the Flask application instance
app = create_app()


if __name__ == "__main__":
    with app.app_context():
        db.create_all()
    app.run(debug=True, host="127.0.0.1", port=8080)
