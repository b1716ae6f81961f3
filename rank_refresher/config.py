"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

from rank_refresher.models import Settings, to_bool, to_int

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- Supabase ---
# クライアントは初回アクセス時に生成するため、未設定でも import は通す
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_SECRET_KEY: str = os.getenv("SUPABASE_SECRET_KEY", "")

# --- スクレイパー設定 ---
SCRAPER_TYPE: str = os.getenv("SCRAPER_TYPE", "serpapi")
SCRAPING_API: str = os.getenv("SCRAPING_API", "")
SCRAPE_DELAY: str = os.getenv("SCRAPE_DELAY", "0")  # ミリ秒
SCRAPE_RETRY: str = os.getenv("SCRAPE_RETRY", "false")

# --- リクエスト設定 ---
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))  # 秒
MAX_SCRAPE_DELAY_MS = 30000
REFRESH_MAX_WORKERS = int(os.getenv("REFRESH_MAX_WORKERS", "5"))

# --- 再試行キュー ---
DATA_DIR = _PROJECT_ROOT / "data"
RETRY_QUEUE_PATH = Path(os.getenv("RETRY_QUEUE_PATH", str(DATA_DIR / "failed_queue.json")))

# --- ログ ---
LOG_DIR = Path(os.getenv("LOG_DIR", str(_PROJECT_ROOT / "logs")))


def load_settings() -> Settings:
    """環境変数からスクレイパー設定を組み立てる."""
    return Settings(
        scraper_type=SCRAPER_TYPE,
        scraping_api=SCRAPING_API,
        scrape_delay=to_int(SCRAPE_DELAY) or 0,
        scrape_retry=to_bool(SCRAPE_RETRY),
    )
