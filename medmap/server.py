"""medmap API server"""

import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from medmap.config import Config, load_config
from medmap.generator import Generator
from medmap.routes import register_routes
from medmap.services import ConceptVerifier, MindMapBuilder, NodeRegenerator
from medmap.variable_handler import VariableHandler


class MindMapAPIServer:
    """Flask API server turning medical notes into verifiable mind maps"""

    def __init__(
        self,
        name: str = "medmap",
        config_path: Optional[str] = None,
        config: Optional[Config] = None,
    ):
        load_dotenv()
        self.config = config if config is not None else load_config(config_path)

        self.app = Flask(name)
        self.app.logger.setLevel(self.config.get("loglevel", default=logging.INFO))
        if self.config.max_upload_mb:
            self.app.config["MAX_CONTENT_LENGTH"] = self.config.max_upload_mb * 1024 * 1024
        register_routes(self)
        self.add_errorhandlers()

        self.variable_handler = VariableHandler(self.config)
        self.generator = Generator(self.config, self.variable_handler)
        self.mindmap_builder = MindMapBuilder(self.config, self.generator)
        self.node_regenerator = NodeRegenerator(self.config, self.generator)
        self.concept_verifier = ConceptVerifier(self.config, self.generator)

    def add_errorhandlers(self):
        """Register Flask error handlers"""

        @self.app.errorhandler(404)
        def not_found(_):
            return jsonify({"error": "The requested resource was not found."}), 404

        @self.app.errorhandler(405)
        def method_not_allowed(_):
            return jsonify({"error": "Method not allowed."}), 405

        @self.app.errorhandler(413)
        def too_large(_):
            return jsonify({"error": "Uploaded file is too large."}), 413

        @self.app.errorhandler(500)
        def server_error(exception):
            """Manually raise an internal server error:
            flask.abort(500)
            """
            self.app.logger.error("Error occured: %s", exception)
            return jsonify({"error": "An internal server error occurred."}), 500
