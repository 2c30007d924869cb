"""
Main entry point for the Steel Buckle content API.

IMPORTANT: Read `DESIGN.md` before making changes.
"""
import logging
import os

from steelbuckle import create_app

app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 5000))

    # Set FLASK_ENV=production to disable debug mode
    debug = os.environ.get('FLASK_ENV') != 'production'
    host = '127.0.0.1' if debug else '0.0.0.0'

    logging.basicConfig(level=logging.INFO)
    logging.getLogger(__name__).info("Starting Steel Buckle API on http://%s:%s", host, port)
    logging.getLogger(__name__).info("Environment: %s", "Development" if debug else "Production")

    app.run(host=host, port=port, debug=debug)
