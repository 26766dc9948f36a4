# config.py
import os

# --- Crawler ---
CRAWLER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36',
    'Accept-Language': 'ja-JP,ja;q=0.9,en-US;q=0.7,en;q=0.6',
}

# --- HTTP Client Defaults ---
CRAWLER_HTTP_TOTAL_TIMEOUT_SECONDS = int(os.getenv('CRAWLER_HTTP_TOTAL_TIMEOUT_SECONDS', 60))
CRAWLER_HTTP_CONNECT_TIMEOUT_SECONDS = int(os.getenv('CRAWLER_HTTP_CONNECT_TIMEOUT_SECONDS', 15))
CRAWLER_HTTP_SOCK_READ_TIMEOUT_SECONDS = int(os.getenv('CRAWLER_HTTP_SOCK_READ_TIMEOUT_SECONDS', 45))
CRAWLER_HTTP_CONCURRENCY_LIMIT = int(os.getenv('CRAWLER_HTTP_CONCURRENCY_LIMIT', 50))

# Upper bound for a single adapter call inside the update job
CRAWLER_ADAPTER_TIMEOUT_SECONDS = float(os.getenv('CRAWLER_ADAPTER_TIMEOUT_SECONDS', 120))

# --- Per-source rate limit ---
CRAWLER_RATE_LIMIT_PER_SECOND = float(os.getenv('CRAWLER_RATE_LIMIT_PER_SECOND', 2))
CRAWLER_RATE_LIMIT_JITTER_SECONDS = float(os.getenv('CRAWLER_RATE_LIMIT_JITTER_SECONDS', 1.0))

# --- Retry on empty body (GANMA, Mecha Comic) ---
CRAWLER_EMPTY_BODY_RETRY_ATTEMPTS = int(os.getenv('CRAWLER_EMPTY_BODY_RETRY_ATTEMPTS', 3))
CRAWLER_EMPTY_BODY_RETRY_DELAY_SECONDS = float(os.getenv('CRAWLER_EMPTY_BODY_RETRY_DELAY_SECONDS', 1.0))

# --- Update Job ---
UPDATE_JOB_PAGE_SIZE = int(os.getenv('UPDATE_JOB_PAGE_SIZE', 10))
PUBLISHER_TIMEZONE = os.getenv('PUBLISHER_TIMEZONE', 'Asia/Tokyo')

# --- Notification ---
NOTIFICATION_PACING_SECONDS = float(os.getenv('NOTIFICATION_PACING_SECONDS', 0.5))
NOTIFICATION_USERNAME = os.getenv('NOTIFICATION_USERNAME', 'Manga Tracker')

# --- Remote Browser (Sunday Webry) ---
BROWSER_ENDPOINT = os.getenv('BROWSER_ENDPOINT') or None
BROWSER_CONNECT_OVER_CDP = os.getenv('BROWSER_CONNECT_OVER_CDP', 'false').strip().lower() in {'1', 'true', 'yes', 'on'}
BROWSER_NAVIGATION_TIMEOUT_MS = int(os.getenv('BROWSER_NAVIGATION_TIMEOUT_MS', 30000))

# --- Source specific ---
ICHIJIN_PLUS_API_KEY = os.getenv('ICHIJIN_PLUS_API_KEY', 'GGXGejnSsZw-IxHKQp8OQKHH-NDItSbEq5PU0g2w1W4=')

# --- Logging ---
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
