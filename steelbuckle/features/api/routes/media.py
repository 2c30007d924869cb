"""
Media reference lookups, media library and editor operations.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from pathlib import PurePosixPath

from flask import current_app, jsonify, request
from flask_login import login_required

from steelbuckle.errors import ApiError, NotFoundError, UpstreamError, ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.media import Media, MediaReference
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import batch_response, json_body, no_cache, notify_content_changed, string_field
from steelbuckle.utils.media_host import public_id_from_url
from steelbuckle.utils.media_resolver import add_cache_bust, now_ms, strip_query

from ..blueprint import bp

ALLOWED_UPLOAD_TYPES = ("image/jpeg", "image/png", "image/gif", "image/svg+xml", "image/webp")


def _cache_bust_value():
    return request.args.get("_t") or str(now_ms())


def _busted(mapping, stamp):
    return {key: add_cache_bust(url, stamp) for key, url in mapping.items()}


@bp.route("/media", methods=["GET"])
def get_media():
    """
    ?key=      single reference (404 when missing or dangling)
    ?keys=a,b  map of reference key -> URL
    ?pageId=p  every reference under `p.` or `p_page.` (may be combined with keys)
    otherwise  every asset URL, newest first
    """
    stamp = _cache_bust_value()
    key = request.args.get("key")
    keys = [k.strip() for k in (request.args.get("keys") or "").split(",") if k.strip()]
    page_id = (request.args.get("pageId") or "").strip()

    try:
        if key:
            ref = MediaReference.resolve(key)
            if ref is None:
                return no_cache(jsonify({"success": False, "error": "Media not found"})), 404
            return no_cache(
                jsonify(
                    {
                        "referenceKey": ref.reference_key,
                        "mediaPath": add_cache_bust(ref.media.path, stamp),
                        "mediaType": ref.media.media_type,
                        "altText": ref.media.alt_text,
                    }
                )
            )

        if keys or page_id:
            result = {}
            if page_id:
                result.update(MediaReference.for_page_prefix(page_id))
            if keys:
                result.update(MediaReference.resolve_many(keys))
            return no_cache(jsonify(_busted(result, stamp)))

        items = [add_cache_bust(media.path, stamp) for media in Media.library()]
        return no_cache(jsonify({"items": items}))
    except Exception as e:
        current_app.logger.error(f"Error fetching media: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to fetch media"}), 500


@bp.route("/media/library", methods=["GET"])
def media_library():
    stamp = _cache_bust_value()
    try:
        items = []
        for media in Media.library():
            item = media.to_dict()
            item["url"] = add_cache_bust(media.path, stamp)
            items.append(item)
        return no_cache(jsonify({"items": items}))
    except Exception as e:
        current_app.logger.error(f"Error fetching media library: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to fetch media library"}), 500


@bp.route("/media/upload", methods=["POST"])
@csrf_protect
@login_required
def upload_media():
    """Store an image at the media host and record it (optionally pointing a reference at it)."""
    file = request.files.get("file")
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    content_type = (file.mimetype or "").lower()
    if content_type not in ALLOWED_UPLOAD_TYPES:
        raise ValidationError(
            f"File type not allowed. Please upload an image file ({', '.join(ALLOWED_UPLOAD_TYPES)})"
        )

    data = file.read()
    max_bytes = current_app.config.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
    if len(data) > max_bytes:
        raise ValidationError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")

    folder = (request.form.get("folder") or current_app.config.get("MEDIA_FOLDER") or "media").strip("/")
    reference_key = (request.form.get("referenceKey") or "").strip()
    host = current_app.extensions["media_host"]

    try:
        uploaded = host.upload(data, file.filename, content_type, folder=folder)
        media = Media(
            filename=file.filename,
            path=uploaded["secure_url"],
            cloudinary_id=uploaded["public_id"],
            media_type=content_type,
            alt_text=PurePosixPath(file.filename).stem or "Image",
        )
        db.session.add(media)
        db.session.flush()
        if reference_key:
            MediaReference.point(reference_key, media)
        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error uploading file {file.filename}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to upload file"}), 500

    notify_content_changed("media")
    return jsonify(
        {
            "success": True,
            "message": "File uploaded successfully",
            "url": add_cache_bust(media.path, now_ms()),
            "mediaId": media.id,
            "publicId": media.cloudinary_id,
            "originalName": file.filename,
            "referenceKey": reference_key or None,
        }
    )


def _locate_media(path):
    """Find the asset for a URL: exact path, filename stem, path basename, else register hosted URLs."""
    media = Media.find_by_path(path)
    if media is not None:
        return media

    basename = path.rstrip("/").rsplit("/", 1)[-1]
    media = Media.find_by_filename_stem(basename) or Media.find_by_basename(basename)
    if media is not None:
        media.path = path
        media.cloudinary_id = public_id_from_url(path) or media.cloudinary_id
        return media

    public_id = public_id_from_url(path)
    if public_id is None:
        return None
    media = Media(filename=basename, path=path, cloudinary_id=public_id, media_type="image")
    db.session.add(media)
    db.session.flush()
    return media


def _apply_media_update(item):
    reference_key = item.get("referenceKey") if isinstance(item, dict) else None
    media_path = item.get("mediaPath") if isinstance(item, dict) else None
    if not isinstance(reference_key, str) or not isinstance(media_path, str):
        return {
            "referenceKey": reference_key if isinstance(reference_key, str) else "",
            "success": False,
            "error": "referenceKey and mediaPath must be strings",
        }
    reference_key = reference_key.strip()
    media_path = strip_query(media_path)
    if not reference_key or not media_path:
        return {"referenceKey": reference_key, "success": False, "error": "referenceKey and mediaPath are required"}

    try:
        with db.session.begin_nested():
            media = _locate_media(media_path)
            if media is None:
                return {"referenceKey": reference_key, "success": False, "error": "Media not found"}
            MediaReference.point(reference_key, media)
        return {"referenceKey": reference_key, "success": True, "mediaId": media.id}
    except Exception as e:
        current_app.logger.error(f"Error updating media reference {reference_key}: {e}", exc_info=True)
        return {"referenceKey": reference_key, "success": False, "error": "Failed to update media reference"}


@bp.route("/media/update", methods=["POST"])
@csrf_protect
@login_required
def update_media_references():
    updates = json_body().get("updates")
    if not isinstance(updates, list):
        raise ValidationError("Invalid request format. Expected 'updates' array.")

    try:
        results = [_apply_media_update(item) for item in updates]
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating media references: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to update media"}), 500

    if any(r["success"] for r in results):
        notify_content_changed("media")
    return batch_response(results)


@bp.route("/media/<int:media_id>", methods=["PUT"])
@csrf_protect
@login_required
def update_media_metadata(media_id):
    media = Media.get_by_id(media_id)
    if media is None:
        raise NotFoundError("Media not found")

    data = json_body()
    if "filename" in data:
        filename = string_field(data, "filename")
        if not filename:
            raise ValidationError("Filename cannot be empty")
        media.filename = filename
    if "altText" in data:
        media.alt_text = string_field(data, "altText", strip=False) or None

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating media {media_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to update media"}), 500

    notify_content_changed("media")
    return jsonify({"success": True, "media": media.to_dict()})


@bp.route("/media/delete", methods=["POST"])
@csrf_protect
@login_required
def delete_media():
    """Delete an asset locally; remote deletion is best-effort."""
    data = json_body()
    media_id = data.get("id")
    if media_id in (None, ""):
        raise ValidationError("Media ID is required")

    media = Media.get_by_id(media_id)
    if media is None:
        raise NotFoundError("Media not found")

    public_id = string_field(data, "publicId") or media.cloudinary_id or public_id_from_url(media.path)
    remote_deleted = False
    if public_id:
        try:
            remote_deleted = current_app.extensions["media_host"].destroy(public_id)
        except UpstreamError as e:
            current_app.logger.warning(f"Remote delete failed for {public_id}: {e.message}")

    try:
        Media.remove(media)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting media {media_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to delete media"}), 500

    notify_content_changed("media")
    return jsonify({"success": True, "message": "Media deleted successfully", "remoteDeleted": remote_deleted})
