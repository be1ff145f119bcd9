"""Termin API constants and default values."""

# Storage
DEFAULT_DATA_DIR = "~/.termin-api"
COLLECTIONS_DIRNAME = "collections"
ENVIRONMENTS_DIRNAME = "environments"
CONFIG_FILENAME = "config.json"
HISTORY_FILENAME = "history.json"
DOCUMENT_SUFFIX = ".json"
JSON_INDENT = 2

# Request execution
DEFAULT_TIMEOUT_MS = 30000
CONNECTION_TEST_TIMEOUT_MS = 5000
DEFAULT_MAX_HISTORY_SIZE = 100

# HTTP Methods
SUPPORTED_HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
PROXY_SCHEMES = ["http", "https", "socks5"]

# Content types
CONTENT_TYPE_HEADER = "Content-Type"
JSON_CONTENT_TYPE = "application/json"
FORM_URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Identifier prefixes
COLLECTION_ID_PREFIX = "col"
REQUEST_ID_PREFIX = "req"
FOLDER_ID_PREFIX = "fld"
ENVIRONMENT_ID_PREFIX = "env"
HISTORY_ID_PREFIX = "hist"
