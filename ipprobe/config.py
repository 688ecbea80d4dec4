"""Constants and configuration for ipprobe."""

from ipprobe.models import Target

# DNS-over-HTTPS resolver (JSON API)
DNS_API = "https://dns.google/resolve"

# Latency probe targets. Response bodies are ignored; only settlement time matters.
SPEED_TEST_TARGETS: tuple[Target, ...] = (
    Target("Google", "https://www.google.com/favicon.ico"),
    Target("Baidu", "https://www.baidu.com/favicon.ico"),
    Target("Facebook", "https://www.facebook.com/favicon.ico"),
    Target("Twitter", "https://twitter.com/favicon.ico"),
    Target("Amazon", "https://www.amazon.com/favicon.ico"),
    Target("Microsoft", "https://www.microsoft.com/favicon.ico"),
)

# Latency color thresholds (milliseconds)
FAST_THRESHOLD_MS = 300.0    # Green: < 300ms
MEDIUM_THRESHOLD_MS = 500.0  # Orange: < 500ms
# Red: >= 500ms

SPEED_TEST_NOTE = "Note: Latency values are for reference only. Actual values may be lower."

# Public IP echo services
IPIFY_V4_URL = "https://api.ipify.org?format=json"
IPIFY_V6_URL = "https://api64.ipify.org?format=json"
HTTPBIN_IP_URL = "https://httpbin.org/ip"

# Geolocation services, formatted with the IP to look up
IPAPI_URL_TEMPLATE = "https://ipapi.co/{ip}/json/"
IPINFO_URL_TEMPLATE = "https://ipinfo.io/{ip}/json"

# Default settings
DEFAULT_TIMEOUT = 10.0
DEFAULT_IP_SOURCE = "ipify"
DEFAULT_GEO_SOURCE = "ipapi"
DEFAULT_RECORD_TYPE = "A"

# User agent for HTTP requests
USER_AGENT = "ipprobe/0.1.0"
