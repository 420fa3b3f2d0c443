"""Environment variable names, default values and ACME endpoints."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

DOMAINS = "DOMAINS"
FILENAME = "FILENAME"
ACCOUNT_EMAIL = "ACCOUNT_EMAIL"
ACCOUNT_KEY_FILE = "ACCOUNT_KEY_FILE"
LE_TOS_AGREED = "LE_TOS_AGREED"
CA_DIR = "CA_DIR"
LE_CRT_KEY_TYPE = "LE_CRT_KEY_TYPE"
OUTPUT_DIRECTORY = "OUTPUT_DIRECTORY"
DISABLE_CP = "DISABLE_CP"
DNS_TIMEOUT = "DNS_TIMEOUT"
DNS_RESOLVERS = "DNS_RESOLVERS"
DNS_AUTH_TOKEN = "DNS_AUTH_TOKEN"
DNS_AUTH_TOKEN_FILE = "DNS_AUTH_TOKEN_FILE"
DNS_AUTH_TOKEN_VAULT = "DNS_AUTH_TOKEN_VAULT"
DNS_AUTH_TOKEN_SECRET = "DNS_AUTH_TOKEN_SECRET"
WEB_ROOT = "WEB_ROOT"
WEB_ENABLED = "WEB_ENABLED"
LOG_LEVEL = "LOG_LEVEL"
LOG_FORMAT = "LOG_FORMAT"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_ACCOUNT_KEY_FILE = "./account.key"
DEFAULT_LE_TOS_AGREED = "true"
DEFAULT_DISABLE_CP = "true"
DEFAULT_LE_CRT_KEY_TYPE = "RSA2048"
DEFAULT_CA_DIR = "STAGING"
DEFAULT_DNS_TIMEOUT = "0"
DEFAULT_DNS_AUTH_TOKEN_SECRET = "do-auth-token"
DEFAULT_OUTPUT_DIRECTORY = "./"
DEFAULT_WEB_ROOT = "./www"
DEFAULT_WEB_ENABLED = "false"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "text"

# ---------------------------------------------------------------------------
# ACME directories
# ---------------------------------------------------------------------------

ACME_PRODUCTION_ENV = "PRODUCTION"
ACME_STAGING_ENV = "STAGING"
ACME_TEST_ENV = "TEST"

ACME_PRODUCTION_CA_DIR = "https://acme-v02.api.letsencrypt.org/directory"
ACME_STAGING_CA_DIR = "https://acme-staging-v02.api.letsencrypt.org/directory"
# Local Boulder / Pebble instance
ACME_TEST_CA_DIR = "http://localhost:4000/directory"

KNOWN_CA_DIRS: dict[str, str] = {
    ACME_PRODUCTION_ENV: ACME_PRODUCTION_CA_DIR,
    ACME_STAGING_ENV: ACME_STAGING_CA_DIR,
    ACME_TEST_ENV: ACME_TEST_CA_DIR,
}

# ---------------------------------------------------------------------------
# Renewal thresholds (days before expiry)
# ---------------------------------------------------------------------------

MINIMUM_REMAINING_DAYS = 21
INITIAL_MINIMUM_REMAINING_DAYS = 21
RENEWAL_CHECK_INTERVAL_SECONDS = 24 * 60 * 60
