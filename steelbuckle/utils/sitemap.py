"""
Localized route table, sitemap.xml and robots.txt.
"""
from datetime import datetime, timezone
from xml.etree import ElementTree as ET

from steelbuckle.models.translation import SUPPORTED_LANGUAGES

ROUTE_TRANSLATIONS = {
    "et": {
        "home": "",
        "about": "ettevottest",
        "contact": "kontakt",
        "projects": "tehtud-tood",
        "services": "teenused",
        "railway-maintenance": "teenused/raudteede-jooksev-korrashoid",
        "railway-construction": "teenused/raudtee-ehitus",
        "repair-renovation": "teenused/remont-ja-renoveerimine",
        "design": "teenused/projekteerimine",
    },
    "en": {
        "home": "",
        "about": "about",
        "contact": "contact",
        "projects": "projects",
        "services": "services",
        "railway-maintenance": "services/railway-maintenance",
        "railway-construction": "services/railway-construction",
        "repair-renovation": "services/repair-renovation",
        "design": "services/design",
    },
    "ru": {
        "home": "",
        "about": "o-nas",
        "contact": "kontakty",
        "projects": "proekty",
        "services": "uslugi",
        "railway-maintenance": "uslugi/obsluzhivanie-zheleznykh-dorog",
        "railway-construction": "uslugi/stroitelstvo-zheleznykh-dorog",
        "repair-renovation": "uslugi/remont-i-renovatsiya",
        "design": "uslugi/proektirovanie",
    },
    "lv": {
        "home": "",
        "about": "par-mums",
        "contact": "kontakti",
        "projects": "projekti",
        "services": "pakalpojumi",
        "railway-maintenance": "pakalpojumi/dzelzcela-apkope",
        "railway-construction": "pakalpojumi/dzelzcela-buvnieciba",
        "repair-renovation": "pakalpojumi/remonts-un-renovacija",
        "design": "pakalpojumi/projektesana",
    },
}

# (route key, change frequency, priority)
SITEMAP_ROUTES = (
    ("home", "weekly", 1.0),
    ("about", "monthly", 0.8),
    ("contact", "monthly", 0.8),
    ("projects", "weekly", 0.9),
    ("railway-maintenance", "monthly", 0.8),
    ("repair-renovation", "monthly", 0.8),
    ("railway-construction", "monthly", 0.8),
    ("design", "monthly", 0.8),
)

ROBOTS_DISALLOW = (
    "/admin/",
    "/api/",
    "/_next/",
    "/*.json$",
    "/*/projects/cm*",
    "/*/proekty/cm*",
    "/*/projekti/cm*",
    "/*/tehtud-tood/cm*",
)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def localized_url(base_url, lang, route_key):
    path = ROUTE_TRANSLATIONS[lang].get(route_key, "")
    url = f"{base_url.rstrip('/')}/{lang}"
    return f"{url}/{path}" if path else url


def sitemap_entries(base_url):
    for route_key, change_frequency, priority in SITEMAP_ROUTES:
        for lang in SUPPORTED_LANGUAGES:
            yield {
                "url": localized_url(base_url, lang, route_key),
                "changefreq": change_frequency,
                "priority": priority,
            }


def build_sitemap_xml(base_url, last_modified=None):
    last_modified = last_modified or datetime.now(timezone.utc)
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for entry in sitemap_entries(base_url):
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = entry["url"]
        ET.SubElement(url, "lastmod").text = last_modified.strftime("%Y-%m-%d")
        ET.SubElement(url, "changefreq").text = entry["changefreq"]
        ET.SubElement(url, "priority").text = f"{entry['priority']:.1f}"
    body = ET.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'


def robots_txt(base_url):
    lines = ["User-Agent: *", "Allow: /"]
    lines.extend(f"Disallow: {path}" for path in ROBOTS_DISALLOW)
    lines.append("")
    lines.append(f"Sitemap: {base_url.rstrip('/')}/sitemap.xml")
    return "\n".join(lines) + "\n"
