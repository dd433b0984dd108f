"""Configuration settings for the catalog server."""

import os


DATABASE_PATH = os.environ.get("CATALOG_DATABASE_PATH", "/app/data/catalog.db")

CATALOG_HOST = os.environ.get("CATALOG_HOST", "0.0.0.0")

CATALOG_PORT = int(os.environ.get("CATALOG_PORT", os.environ.get("PORT", "3000")))

UPLOAD_DIR = os.environ.get("CATALOG_UPLOAD_DIR", "/app/data/uploads")

METADATA_JSON_PATH = os.environ.get("CATALOG_METADATA_JSON_PATH", "/app/data/metadata.json")

UPLOAD_USER = os.environ.get("UPLOAD_USER", "admin")

UPLOAD_PASS = os.environ.get("UPLOAD_PASS", "password123")

UPLOAD_REALM = "Upload Area"

SESSION_COOKIE_NAME = os.environ.get("CATALOG_SESSION_COOKIE", "sid")

# "session" notifies only connections sharing the session id, "global" notifies everyone
BASKET_NOTIFY_SCOPE = os.environ.get("CATALOG_BASKET_NOTIFY_SCOPE", "session")
