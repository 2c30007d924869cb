from flask import Response, current_app

from steelbuckle.utils.sitemap import build_sitemap_xml, robots_txt

from .blueprint import bp


@bp.route("/sitemap.xml", methods=["GET"])
def sitemap():
    xml = build_sitemap_xml(current_app.config["PUBLIC_BASE_URL"])
    return Response(xml, mimetype="application/xml")


@bp.route("/robots.txt", methods=["GET"])
def robots():
    return Response(robots_txt(current_app.config["PUBLIC_BASE_URL"]), mimetype="text/plain")
