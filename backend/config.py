import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./seat_allocator.db")

# rows * columns * students per bench may not go above this
MAX_ROOM_CAPACITY = int(os.environ.get("MAX_ROOM_CAPACITY", "200"))

CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", "300"))
MAX_PDF_COPIES = int(os.environ.get("MAX_PDF_COPIES", "10"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
