"""Configuration management for TikSnap."""

from pathlib import Path
from typing import Dict, Tuple

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Database configuration
DB_PATH = PROJECT_ROOT / "tiksnap.db"
DB_URL = f"sqlite:///{DB_PATH}"

# Logs configuration
LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE = LOG_DIR / "tiksnap.log"

# Retry configuration
MAX_RETRIES = 5  # Retries after the first attempt
RETRY_INITIAL_WAIT = 2.0  # Seconds
RETRY_MAX_WAIT = 10.0  # Seconds
RETRY_MULTIPLIER = 2.0  # Exponential backoff
ESCALATE_AFTER_ATTEMPTS = 3  # Empty / 429 responses become fatal from this attempt on

# Pagination configuration
FIRST_PAGE_COUNT = 35
PAGE_COUNT = 30

# HTTP configuration
CONNECT_TIMEOUT = 15.0  # Seconds
READ_TIMEOUT = 30.0  # Seconds

# Browser fingerprint sent with every request
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36 Edg/144.0.0.0"
)
SEC_CH_UA = '"Not(A:Brand";v="8", "Chromium";v="144", "Microsoft Edge";v="144"'

# TikTok endpoints
TIKTOK_BASE_URL = "https://www.tiktok.com"
TIKTOK_ITEM_LIST_URL = f"{TIKTOK_BASE_URL}/api/post/item_list/"

# Status codes carried in JSON bodies
NOT_FOUND_STATUS_CODE = 10201
USER_NOT_FOUND_STATUS_CODES: Tuple[int, ...] = (10201, 10202, 10221)

# Fixed query fields of the item list request, in the order the web app sends them
FINGERPRINT_PARAMS: Dict[str, str] = {
    "aid": "1988",
    "app_language": "en",
    "app_name": "tiktok_web",
    "browser_language": "en-US",
    "browser_name": "Mozilla",
    "browser_online": "true",
    "browser_platform": "Win32",
    "browser_version": USER_AGENT.replace("Mozilla/", ""),
    "channel": "tiktok_web",
    "cookie_enabled": "true",
    "coverFormat": "2",
    "device_platform": "web_pc",
    "focus_state": "true",
    "history_len": "2",
    "is_fullscreen": "false",
    "is_page_visible": "true",
    "language": "en",
    "os": "windows",
    "priority_region": "",
    "referer": "",
    "region": "ID",
    "screen_height": "1080",
    "screen_width": "1920",
    "tz_name": "Asia/Jakarta",
    "user_is_login": "false",
    "webcast_language": "en",
}

# User-facing messages
USER_NOT_FOUND_MESSAGE = "User not found!"
ANTI_BOT_MESSAGE = (
    "TikTok API returned empty response. This is often due to TikTok's anti-bot protection. "
    "Try providing a cookie string from your browser session for better results."
)
EMPTY_RESULT_MESSAGE = f"Unable to fetch posts. {ANTI_BOT_MESSAGE}"
RATE_LIMIT_MESSAGE = "Rate limited by TikTok. Please try again later."

# App information
APP_NAME = "TikSnap"
APP_VERSION = "0.1.0"
