"""
Project list, editing, per-language titles and ordering.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import current_app, jsonify, request
from flask_login import login_required

from steelbuckle.errors import ApiError, NotFoundError, ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.project import PLACEHOLDER_IMAGE, Project
from steelbuckle.models.translation import DEFAULT_LANGUAGE
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import json_body, no_cache, string_field
from steelbuckle.utils.timeouts import run_with_timeout

from ..blueprint import bp
from .media import ALLOWED_UPLOAD_TYPES


def _get_project_or_404(project_id):
    project = Project.get_by_id(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


def _submitted_fields():
    """Project fields from a multipart form or a JSON body."""
    if request.mimetype in ("multipart/form-data", "application/x-www-form-urlencoded"):
        return request.form.to_dict()
    return json_body()


def _year_field(fields):
    """Year as text; JSON clients may send it as a number."""
    year = fields.get("year")
    if isinstance(year, int) and not isinstance(year, bool):
        return str(year)
    return string_field(fields, "year")


def _store_project_image(fields):
    """URL of an uploaded image file, else the submitted imageUrl, else None."""
    image = request.files.get("image")
    if image is not None and image.filename:
        content_type = (image.mimetype or "").lower()
        if content_type not in ALLOWED_UPLOAD_TYPES:
            raise ValidationError("File type not allowed")
        data = image.read()
        if len(data) > current_app.config.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024):
            raise ValidationError("File too large")
        folder = f"{current_app.config.get('MEDIA_FOLDER', 'media')}/projects"
        uploaded = current_app.extensions["media_host"].upload(data, image.filename, content_type, folder=folder)
        return uploaded["secure_url"]
    return string_field(fields, "imageUrl") or None


@bp.route("/projects", methods=["GET"])
def list_projects():
    """Projects in display order, titled in `lang`. Bounded by PROJECTS_QUERY_TIMEOUT."""
    lang = request.args.get("lang") or DEFAULT_LANGUAGE
    timeout = current_app.config.get("PROJECTS_QUERY_TIMEOUT", 10)
    try:
        projects = run_with_timeout(Project.list_for_language, timeout, lang)
        return no_cache(jsonify(projects))
    except ApiError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error fetching projects: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to fetch projects"}), 500


@bp.route("/projects", methods=["POST"])
@csrf_protect
@login_required
def create_project():
    fields = _submitted_fields()
    title = string_field(fields, "title")
    year = _year_field(fields)
    language = string_field(fields, "language") or DEFAULT_LANGUAGE
    if not title:
        raise ValidationError("Title is required")

    try:
        image = _store_project_image(fields) or PLACEHOLDER_IMAGE
        project = Project(year=year, image=image, display_order=Project.next_display_order())
        project.set_title(language, title)
        db.session.add(project)
        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating project: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to create project"}), 500

    return jsonify(project.to_dict(language)), 201


@bp.route("/projects/<project_id>", methods=["GET"])
def get_project(project_id):
    lang = request.args.get("lang") or DEFAULT_LANGUAGE
    project = _get_project_or_404(project_id)
    return no_cache(jsonify(project.to_dict(lang)))


@bp.route("/projects/<project_id>", methods=["PUT"])
@csrf_protect
@login_required
def update_project(project_id):
    project = _get_project_or_404(project_id)
    fields = _submitted_fields()
    language = string_field(fields, "language") or DEFAULT_LANGUAGE

    try:
        image = _store_project_image(fields)
        if image:
            project.image = image
        if "year" in fields:
            project.year = _year_field(fields)
        title = string_field(fields, "title")
        if title:
            project.set_title(language, title)
        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating project {project_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to update project"}), 500

    return jsonify(project.to_dict(language))


@bp.route("/projects/<project_id>", methods=["DELETE"])
@csrf_protect
@login_required
def delete_project(project_id):
    project = _get_project_or_404(project_id)
    try:
        db.session.delete(project)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting project {project_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to delete project"}), 500
    return jsonify({"success": True, "message": "Project deleted successfully"})


@bp.route("/projects/<project_id>/translations", methods=["GET"])
def get_project_translations(project_id):
    project = _get_project_or_404(project_id)
    return no_cache(jsonify(project.titles()))


def _save_titles(project_id, translations):
    if not isinstance(translations, dict):
        raise ValidationError("translations must be an object of language -> title")
    project = _get_project_or_404(project_id)
    saved = {}
    try:
        for lang, title in translations.items():
            title = (title or "").strip() if isinstance(title, str) else ""
            if not title:
                continue
            project.set_title(lang, title)
            saved[lang] = title
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving translations for project {project_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to save project translations"}), 500
    return jsonify({"success": True, "translations": project.titles(), "updated": sorted(saved)})


@bp.route("/projects/<project_id>/translations", methods=["POST"])
@csrf_protect
@login_required
def save_project_translations(project_id):
    return _save_titles(project_id, json_body().get("translations"))


@bp.route("/projects/translations", methods=["POST"])
@csrf_protect
@login_required
def save_project_translations_by_body():
    data = json_body()
    if not data.get("projectId"):
        raise ValidationError("projectId is required")
    return _save_titles(data["projectId"], data.get("translations"))


@bp.route("/projects/reorder", methods=["POST"])
@csrf_protect
@login_required
def reorder_projects():
    """Apply every {id, displayOrder} pair or none of them."""
    order_updates = json_body().get("orderUpdates")
    if not isinstance(order_updates, list):
        raise ValidationError("Invalid order data. Expected array of updates.")

    try:
        for update in order_updates:
            if not isinstance(update, dict) or not isinstance(update.get("displayOrder"), int):
                raise ValidationError("Each update needs an id and an integer displayOrder")
            project = Project.get_by_id(update.get("id"))
            if project is None:
                raise NotFoundError(f"Project not found: {update.get('id')}")
            project.display_order = update["displayOrder"]
        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating project order: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to update project order"}), 500

    return jsonify({"success": True, "updatedCount": len(order_updates)})
