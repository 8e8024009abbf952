# Environment variables
ENV_BASE_URL = "RESTWIRE_BASE_URL"
ENV_TIMEOUT = "RESTWIRE_TIMEOUT"
ENV_ACCESS_TOKEN = "RESTWIRE_ACCESS_TOKEN"

# Headers
HEADER_USER_AGENT = "User-Agent"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CACHE_CONTROL = "Cache-Control"
HEADER_RETRY_AFTER = "Retry-After"
HEADER_AUTHORIZATION = "Authorization"

# Content types
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_XML = "application/xml"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"

# Files
DOTENV_FILE = ".env"

USER_AGENT_PREFIX = "Restwire.Python"
