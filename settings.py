import os

# Storage backend for the changelog and comment data sources: "memory" or "firestore"
DATA_BACKEND = os.environ.get("DATA_BACKEND", "memory")

ALLOWED_HOSTS = [
    host.strip() for host in
    os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

# --- Thread constants ---
MAX_REPLY_DEPTH = 3
MAX_IMAGES_PER_COMMENT = 3
ANONYMOUS_AUTHOR = "Anonymous"
MAX_TEXT_FIELD_SIZE_KB = 64
MAX_TEXT_FIELD_SIZE_BYTES = MAX_TEXT_FIELD_SIZE_KB * 1024
RECENT_NOTIFICATIONS_LIMIT = 20

# --- Firestore ---
CHANGELOG_COLLECTION = os.environ.get("CHANGELOG_COLLECTION", "changelog")
COMMENTS_COLLECTION = os.environ.get("COMMENTS_COLLECTION", "comments")
COUNTERS_COLLECTION = "counters"
