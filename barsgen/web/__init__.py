"""Flask application factory for the barsgen job API."""

import tempfile
from pathlib import Path

from flask import Flask, jsonify


def create_app(work_dir: Path | None = None) -> Flask:
    app = Flask(__name__)
    app.config["WORK_DIR"] = work_dir or Path(tempfile.mkdtemp(prefix="barsgen_"))

    from barsgen.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    return app
