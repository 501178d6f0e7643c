from flask import jsonify, request

from .decorators import json_required


def register_routes(server):
    """Register routes for the server application"""

    @server.app.route("/api/health", methods=["GET"])
    def health():
        profile_name, profile = server.generator.get_profile()
        return jsonify({"status": "ok", "profile": profile_name, "model": profile.default_model})

    @server.app.route("/api/tokens", methods=["POST"])
    @json_required("input")
    def count_tokens():
        text = str(request.get_json()["input"])
        return jsonify({"response": str(server.generator.count_tokens(text))})

    @server.app.route("/api/process-pdf", methods=["POST"])
    def process_pdf():
        """Turn an uploaded PDF into a mind map.

        Returns:
            JSON: {nodes, edges}, or an error with status 400 when no file was sent.
        """
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"error": "No file provided"}), 400

        server.app.logger.info("Processing upload '%s'", upload.filename)
        try:
            return jsonify(server.mindmap_builder.build(upload.read()))
        except Exception as ex:
            server.app.logger.error("Error processing PDF: %s", ex)
            return jsonify({"error": "Failed to process PDF"}), 500

    @server.app.route("/api/regenerate-node", methods=["POST"])
    @json_required("node")
    def regenerate_node():
        node = request.get_json()["node"]
        data = node.get("data") if isinstance(node, dict) else None
        label = data.get("label") if isinstance(data, dict) else None
        if not isinstance(label, str):
            return jsonify({"error": "Invalid node: 'data.label' must be a string"}), 400

        try:
            return jsonify(server.node_regenerator.regenerate(label))
        except Exception as ex:
            server.app.logger.error("Error regenerating node: %s", ex)
            return jsonify({"error": "Failed to regenerate node"}), 500

    @server.app.route("/api/verify-medical", methods=["POST"])
    @json_required("nodes")
    def verify_medical():
        nodes = request.get_json()["nodes"]
        if not isinstance(nodes, list) or not all(
            isinstance(node, dict) and "id" in node for node in nodes
        ):
            return jsonify({"error": "'nodes' must be a list of nodes with an id"}), 400

        try:
            return jsonify(server.concept_verifier.verify_all(nodes))
        except Exception as ex:
            server.app.logger.error("Error verifying medical concepts: %s", ex)
            return jsonify({"error": "Failed to verify medical concepts"}), 500
