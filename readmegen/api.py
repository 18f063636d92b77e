"""
Flask-based Web API for readmegen.

The editing form posts the whole descriptor with every request; the server
keeps no state between requests.

Endpoints:
    GET  /api/health             - Health check endpoint
    GET  /api/descriptor/default - Sample descriptor the editor starts with
    POST /api/generate           - Render README text, preview and node roles
    POST /api/preview            - Render preview HTML for arbitrary markup
    POST /api/profile            - Apply a GitHub avatar lookup to a descriptor
    POST /api/images             - Apply an uploaded image to a descriptor
    POST /api/download           - Download the README as README.md
"""

import json
import os
from typing import Any

from flask import Flask, Response, jsonify, request

from readmegen import __version__
from readmegen.classifier import classify_document
from readmegen.github import get_profile_lookup
from readmegen.images import MAX_IMAGE_BYTES, encode_image_bytes, ingest_image
from readmegen.parser import parse_document
from readmegen.preview import ViewMode, present, render_preview_html
from readmegen.renderer import EXPORT_FILENAME, render_readme
from readmegen.schema import Descriptor, DescriptorStore, sample_descriptor

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_IMAGE_BYTES  # 10MB max upload


def _json_body() -> dict[str, Any]:
    """
    Return the JSON request body as a dict.

    Raises:
        ValueError: If the body is missing or not a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _descriptor_from(data: Any) -> Descriptor:
    """Accept either a bare descriptor or ``{"descriptor": {...}}``."""
    if isinstance(data, dict) and isinstance(data.get("descriptor"), dict):
        data = data["descriptor"]
    return Descriptor.from_dict(data)


def generate_payload(descriptor: Descriptor, view: ViewMode = ViewMode.RENDERED) -> dict[str, Any]:
    """
    Build the response body for /api/generate.

    Returns:
        Dict with the README text, the selected view, and classified nodes
    """
    readme_content = render_readme(descriptor)
    classified = classify_document(parse_document(readme_content))
    preview = (
        render_preview_html(classified) if view is ViewMode.RENDERED else readme_content
    )
    return {
        "success": True,
        "readme": readme_content,
        "view": view.value,
        "view_label": view.label,
        "preview": preview,
        "nodes": [node.summary() for node in classified],
        "descriptor": descriptor.to_dict(),
    }


@app.route("/api/health", methods=["GET"])
def health_check() -> Response:
    """Health check endpoint."""
    return jsonify({"status": "healthy", "version": __version__})


@app.route("/api/descriptor/default", methods=["GET"])
def default_descriptor() -> Response:
    """Return the sample descriptor the editor starts with."""
    return jsonify(sample_descriptor().to_dict())


@app.route("/api/generate", methods=["POST"])
def generate_readme() -> tuple[Response, int]:
    """
    Generate README text and preview from a descriptor.

    Request: JSON descriptor (optionally wrapped as ``{"descriptor": ...}``)

    Optional parameters (query string or JSON):
        - view: 'rendered' | 'raw' (default: 'rendered')
    """
    try:
        data = _json_body()
        view = ViewMode.parse(data.get("view") or request.args.get("view", "rendered"))
        descriptor = _descriptor_from(data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(generate_payload(descriptor, view)), 200


@app.route("/api/preview", methods=["POST"])
def preview_markup() -> tuple[Response, int]:
    """Render arbitrary README markup in the requested view."""
    try:
        data = _json_body()
        view = ViewMode.parse(data.get("view", "rendered"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    markdown = data.get("markdown")
    if not isinstance(markdown, str):
        return jsonify({"error": "'markdown' must be a string"}), 400

    return jsonify({"success": True, "view": view.value, "preview": present(markdown, view)}), 200


@app.route("/api/profile", methods=["POST"])
def fetch_profile() -> tuple[Response, int]:
    """
    Apply the author's GitHub avatar to a descriptor.

    Request JSON:
        - descriptor: the current descriptor
        - author_handle: optional override of descriptor.author_handle

    A failed lookup returns the descriptor unchanged (loading flag cleared).
    """
    try:
        data = _json_body()
        store = DescriptorStore(_descriptor_from(data))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    handle = data.get("author_handle") or store.descriptor.author_handle
    if not isinstance(handle, str):
        return jsonify({"error": "'author_handle' must be a string"}), 400
    if handle:
        store.begin_profile_lookup()
        store.apply(get_profile_lookup().lookup(handle))

    return jsonify({"success": True, "descriptor": store.descriptor.to_dict()}), 200


@app.route("/api/images", methods=["POST"])
def upload_image() -> tuple[Response, int]:
    """
    Apply an uploaded image to a descriptor.

    Request: multipart/form-data with
        - file: the image
        - slot: 'logo' or 'screenshot'
        - descriptor: JSON-encoded current descriptor (optional)
    """
    if "file" not in request.files:
        return jsonify({"error": "'file' upload required"}), 400

    uploaded_file = request.files["file"]
    if not uploaded_file.filename:
        return jsonify({"error": "No file selected"}), 400

    try:
        raw_descriptor = request.form.get("descriptor")
        descriptor = (
            Descriptor.from_dict(json.loads(raw_descriptor)) if raw_descriptor else Descriptor()
        )
        store = DescriptorStore(descriptor)
        data_uri = encode_image_bytes(uploaded_file.read(), uploaded_file.filename)
        store.apply(ingest_image(request.form.get("slot", ""), data_uri, store.descriptor))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"success": True, "descriptor": store.descriptor.to_dict()}), 200


@app.route("/api/download", methods=["POST"])
def download_readme() -> Response:
    """Return the rendered README as a README.md attachment."""
    try:
        descriptor = _descriptor_from(_json_body())
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return Response(
        render_readme(descriptor).encode("utf-8"),
        mimetype="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle file too large errors."""
    return jsonify({"error": "File too large. Maximum size is 10MB."}), 413


@app.errorhandler(500)
def internal_server_error(error):
    """Handle internal server errors."""
    return jsonify({"error": "Internal server error"}), 500


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Configured Flask application instance.
    """
    return app


def main() -> None:
    """Run the development server."""
    port = int(os.environ.get("READMEGEN_PORT", "5001"))
    print("Starting readmegen API server...")
    print()
    print("API Endpoints:")
    print("  POST /api/generate  - Render README text and preview")
    print("  POST /api/preview   - Render preview for raw markup")
    print("  POST /api/profile   - Fetch GitHub avatar as logo")
    print("  POST /api/images    - Upload logo or screenshot")
    print("  POST /api/download  - Download README.md")
    print("  GET  /api/health    - Health check")
    print()
    print(f"Listening on http://localhost:{port}")
    app.run(host="0.0.0.0", port=port, debug=True)


if __name__ == "__main__":
    main()
