"""
Web application module for the Playbook application.

This module contains the Flask web server that exposes the playbook services
as JSON API endpoints.
"""
import logging
from typing import Optional

from flask import Flask, jsonify, request

from ..models import CATEGORY_LABELS, FormationTemplates, Identity
from ..services import NotFoundError, PlaybookError, ServiceFactory, ValidationError
from ..services.playbook_service import PlaybookService
from ..utils import APP_TITLE, DEFAULT_USER_ID, DEFAULT_USER_NAME
from ..utils.constants import DEFAULT_WEB_HOST, DEFAULT_WEB_PORT

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application: one session collection shared by
    all requests, with the acting user taken from each request.
    """

    def __init__(self, service_factory: Optional[ServiceFactory] = None):
        self.service_factory = service_factory or ServiceFactory()
        services = self.service_factory.create_complete_service_suite()
        self.collection = services['collection']
        self.sync_service = services['sync']

    def playbook_service(self, identity: Identity) -> PlaybookService:
        """Service acting for the given user on the shared collection."""
        return self.service_factory.create_playbook_service(self.collection, identity)


def _request_identity() -> Identity:
    return Identity(
        user_id=request.headers.get("X-User-Id") or DEFAULT_USER_ID,
        user_name=request.headers.get("X-User-Name") or DEFAULT_USER_NAME
    )


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def create_app(app_state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        app_state: Shared state; a fresh one is created when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    state = app_state or WebAppState()
    app.config["APP_STATE"] = state

    def service() -> PlaybookService:
        return state.playbook_service(_request_identity())

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"success": False, "error": str(e), "errors": e.errors}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"success": False, "error": str(e)}), 404

    @app.errorhandler(PlaybookError)
    def handle_playbook_error(e):
        logger.exception("Playbook request failed")
        return jsonify({"success": False, "error": str(e)}), 500

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"success": True, "app": APP_TITLE})

    # ==================== Collection ==================== #

    @app.route("/api/playbooks", methods=["GET"])
    def get_playbooks():
        """Get every loaded playbook and the available tags."""
        body = state.collection.to_dict()
        return jsonify({
            "success": state.collection.error is None,
            "error": state.collection.error,
            "pendingPlayIds": sorted(state.collection.dirty_play_ids),
            **body
        })

    @app.route("/api/sync", methods=["POST"])
    def sync_playbooks():
        """Reload the collection from the remote API."""
        playbooks = state.sync_service.fetch_playbooks()
        if state.collection.error:
            return jsonify({"success": False, "error": state.collection.error}), 502
        return jsonify({"success": True, "playbooks": len(playbooks)})

    @app.route("/api/tags", methods=["GET"])
    def get_tags():
        return jsonify({"success": True, "tags": state.collection.tags.to_list()})

    @app.route("/api/categories", methods=["GET"])
    def get_categories():
        """Get the play categories with display labels."""
        return jsonify({
            "success": True,
            "categories": [
                {"value": category.value, "label": label}
                for category, label in CATEGORY_LABELS.items()
            ]
        })

    @app.route("/api/templates", methods=["GET"])
    def get_templates():
        return jsonify({
            "success": True,
            "templates": [t.to_dict() for t in FormationTemplates.get_all_templates()]
        })

    # ==================== Playbooks ==================== #

    @app.route("/api/playbooks", methods=["POST"])
    def create_playbook():
        """Create a playbook."""
        data = _json_body()
        playbook = service().create_playbook(
            name=data.get("name", ""),
            team_id=data.get("teamId", ""),
            description=data.get("description")
        )
        return jsonify({"success": True, "playbook": playbook.to_dict()}), 201

    @app.route("/api/playbooks/<playbook_id>", methods=["GET"])
    def get_playbook(playbook_id: str):
        playbook = service().get_playbook_by_id(playbook_id)
        if playbook is None:
            raise NotFoundError(f"Playbook with ID {playbook_id} not found")
        return jsonify({"success": True, "playbook": playbook.to_dict()})

    @app.route("/api/playbooks/<playbook_id>/plays", methods=["POST"])
    def create_play(playbook_id: str):
        """Create a play with an initial version and view."""
        data = _json_body()
        play = service().create_play(
            playbook_id,
            name=data.get("name", ""),
            category=data.get("category"),
            tags=data.get("tags") or [],
            description=data.get("description")
        )
        return jsonify({"success": True, "play": play.to_dict()}), 201

    # ==================== Plays ==================== #

    @app.route("/api/plays", methods=["GET"])
    def find_plays():
        """Find plays by ?category= or ?tag=."""
        svc = service()
        category = request.args.get("category")
        tag = request.args.get("tag")
        if category:
            plays = svc.get_plays_by_category(category)
        elif tag:
            plays = svc.get_plays_by_tag(tag)
        else:
            plays = list(state.collection.iter_plays())
        return jsonify({"success": True, "plays": [play.to_dict() for play in plays]})

    @app.route("/api/plays/<play_id>", methods=["GET"])
    def get_play(play_id: str):
        svc = service()
        play = svc.get_play_by_id(play_id)
        if play is None:
            raise NotFoundError(f"Play with ID {play_id} not found")
        current = svc.get_current_version(play)
        return jsonify({
            "success": True,
            "play": play.to_dict(),
            "currentVersion": current.to_dict() if current else None
        })

    @app.route("/api/plays/<play_id>", methods=["PATCH"])
    def update_play(play_id: str):
        """Update play name, description, category, tags or publish state."""
        data = _json_body()
        play = service().update_play(
            play_id,
            name=data.get("name"),
            description=data.get("description"),
            category=data.get("category"),
            tags=data.get("tags"),
            is_published=data.get("isPublished")
        )
        return jsonify({"success": True, "play": play.to_dict()})

    @app.route("/api/plays/<play_id>/duplicate", methods=["POST"])
    def duplicate_play(play_id: str):
        data = request.get_json(silent=True) or {}
        play = service().duplicate_play(play_id, new_name=data.get("newName"))
        return jsonify({"success": True, "play": play.to_dict()}), 201

    @app.route("/api/plays/<play_id>/versions", methods=["POST"])
    def create_version(play_id: str):
        """Branch a new version from the current or a given version."""
        data = _json_body()
        version = service().create_play_version(
            play_id,
            name=data.get("name", ""),
            description=data.get("description"),
            based_on_version_id=data.get("basedOnVersionId")
        )
        return jsonify({"success": True, "version": version.to_dict()}), 201

    @app.route("/api/plays/<play_id>/versions/<version_id>/views/<view_id>", methods=["PUT"])
    def update_view(play_id: str, version_id: str, view_id: str):
        """Replace fields of a view."""
        view = service().update_play_view(play_id, version_id, view_id, _json_body())
        return jsonify({"success": True, "view": view.to_dict()})

    @app.route("/api/plays/<play_id>/versions/<version_id>/views/<view_id>/template",
               methods=["POST"])
    def apply_template(play_id: str, version_id: str, view_id: str):
        data = _json_body()
        view = service().apply_template(play_id, version_id, view_id, data.get("templateId", ""))
        return jsonify({"success": True, "view": view.to_dict()})

    @app.route("/api/plays/<play_id>/versions/<version_id>/views/<view_id>/frame",
               methods=["GET"])
    def get_frame(play_id: str, version_id: str, view_id: str):
        """Marker placements at ?t= seconds into the view's animation."""
        try:
            time = float(request.args.get("t", 0))
        except ValueError:
            raise ValidationError("Query parameter t must be a number")

        play = service().get_play_by_id(play_id)
        version = play.get_version(version_id) if play else None
        view = version.get_view(view_id) if version else None
        if view is None:
            raise NotFoundError(f"View with ID {view_id} not found")

        return jsonify({
            "success": True,
            "time": time,
            "duration": view.duration,
            "positions": [
                {"id": position_id, "x": x, "y": y, "rotation": rotation}
                for position_id, (x, y, rotation) in view.frame_at(time).items()
            ]
        })

    return app


def run_web_app(host: str = DEFAULT_WEB_HOST, port: int = DEFAULT_WEB_PORT,
                fetch_on_start: bool = True) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        fetch_on_start: Load the collection from the remote API before serving
    """
    state = WebAppState()
    if fetch_on_start:
        state.sync_service.fetch_playbooks()
    app = create_app(state)
    app.run(host=host, port=port, debug=False)
