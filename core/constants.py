"""
Core — Constants

Shared limits, cache keys and audit action names.

@file core/constants.py
"""

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# ---------------------------------------------------------------------------
# Post listings (limit / fallback window)
# ---------------------------------------------------------------------------

POSTS_BY_TYPE_LIMIT = 20
POSTS_BY_TYPE_FALLBACK_WINDOW = 400
POSTS_BY_CATEGORY_LIMIT = 200
POSTS_BY_CATEGORY_FALLBACK_WINDOW = 800
POSTS_FEATURED_LIMIT = 20
POSTS_FEATURED_WINDOW = 400
POSTS_ADMIN_BY_TYPE_LIMIT = 200
POSTS_ADMIN_ALL_LIMIT = 500
FEED_ROW_LIMIT = 12

# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------

FAVORITES_PAGE_SIZE = 10
FAVORITES_CACHE_KEY = 'bh_favorites_cache_{uid}'

# ---------------------------------------------------------------------------
# Audit actions
# ---------------------------------------------------------------------------

AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_UPDATE = 'UPDATE'
AUDIT_ACTION_DELETE = 'DELETE'
AUDIT_ACTION_LOGIN = 'LOGIN'
AUDIT_ACTION_LOGOUT = 'LOGOUT'
