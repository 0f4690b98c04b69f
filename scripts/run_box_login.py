#!/usr/bin/env python3
"""
Box Login Development Server

Runs a local Flask app with the Box login routes so the handshake can be
tried against a real Box application. A successful login prints the
verified profile instead of creating a local account.

Usage:
    python scripts/run_box_login.py

    # Different port, verbose logging
    python scripts/run_box_login.py --port 5001 --verbose

Prerequisites:
    - Environment variables must be set:
        export BOX_CLIENT_ID="your_client_id"
        export BOX_CLIENT_SECRET="your_client_secret"
        export BOX_REDIRECT_URI="http://localhost:5000/user/login/box/callback"
    - The redirect URI must be registered in the Box developer console
"""

import argparse
import logging
import secrets
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flask import Flask, get_flashed_messages, jsonify

from social_auth_box.config import ProviderConfig
from social_auth_box.exceptions import ConfigurationError
from social_auth_box.web import create_login_blueprint

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class PrintingReconciler:
    """Shows the verified identity instead of creating an account."""

    def authenticate_user(self, name, email, external_id, token, avatar_url, extra_data):
        logger.info(f"✅ Box login completed for {name} ({external_id})")
        return jsonify(
            {
                "name": name,
                "email": email,
                "external_id": external_id,
                "avatar_url": avatar_url,
            }
        )


def create_app(config: ProviderConfig) -> Flask:
    """Build the development app."""
    app = Flask(__name__)
    app.secret_key = secrets.token_hex(32)
    app.register_blueprint(create_login_blueprint(PrintingReconciler(), config=config))

    @app.route("/user/login")
    def login_page():
        messages = get_flashed_messages()
        return jsonify({"login": "/user/login/box", "messages": messages})

    return app


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a local Box login server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=5000, help="Port to listen on")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = ProviderConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1

    logger.info(f"Open http://{args.host}:{args.port}/user/login/box to log in")
    create_app(config).run(host=args.host, port=args.port, debug=False, use_reloader=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
