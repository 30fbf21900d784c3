import os
from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()


def _env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./orderassist.db")

# Session state: "memory" (per process) or "database" (shared, survives restarts)
SESSION_STORE = os.getenv("SESSION_STORE", "memory").strip().lower()
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "86400"))

# Google Sheets
SHEETS_PROVIDER = os.getenv("SHEETS_PROVIDER", "google").strip().lower()
GOOGLE_SHEET_ID = os.getenv("GOOGLE_SHEET_ID", "")
GOOGLE_SERVICE_ACCOUNT_CREDENTIALS = os.getenv("GOOGLE_SERVICE_ACCOUNT_CREDENTIALS", "{}")

# Language model
AI_PROVIDER = os.getenv("AI_PROVIDER", "openai").strip().lower()
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
AI_STRUCTURED_OUTPUT = _env_bool("AI_STRUCTURED_OUTPUT")

# WhatsApp Cloud API
WHATSAPP_PROVIDER = os.getenv("WHATSAPP_PROVIDER", "cloud").strip().lower()
WHATSAPP_ACCESS_TOKEN = os.getenv("WHATSAPP_ACCESS_TOKEN", "")
WHATSAPP_PHONE_NUMBER_ID = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
WHATSAPP_VERIFY_TOKEN = os.getenv("WHATSAPP_VERIFY_TOKEN", "")
WHATSAPP_API_VERSION = os.getenv("WHATSAPP_API_VERSION", "v19.0")
# "message_id" keys each webhook delivery separately; "sender" keys by phone
WHATSAPP_SESSION_KEY = os.getenv("WHATSAPP_SESSION_KEY", "message_id").strip().lower()

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "20"))

# Business
ASSISTANT_OWNER_NAME = os.getenv("ASSISTANT_OWNER_NAME", "Yeheskiel Yunus Tame")
SERVICE_KEYWORDS = [
    keyword.strip().lower()
    for keyword in os.getenv("SERVICE_KEYWORDS", "website,chatbot,ai").split(",")
    if keyword.strip()
]
PAYMENT_INSTRUCTIONS = os.getenv("PAYMENT_INSTRUCTIONS", "087861330910 (DANA)")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
