import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "marketplace")

PORT = int(os.getenv("PORT", 8000))
SOCKET_PORT = int(os.getenv("SOCKET_PORT", 4000))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", 7))
ACTIVATION_TTL_MINUTES = int(os.getenv("ACTIVATION_TTL_MINUTES", 5))

RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
MAIL_FROM = os.getenv("MAIL_FROM", "Marketplace <no-reply@marketplace.dev>")

STRIPE_API_KEY = os.getenv("STRIPE_API_KEY", "")
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_COMPANY = os.getenv("STRIPE_COMPANY", "Marketplace")

# Platform fee kept from every delivered order
SERVICE_CHARGE = float(os.getenv("SERVICE_CHARGE", 0.10))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def setup_logging():
    """Configures the root logger once per process."""
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(handler)
    root.setLevel(LOG_LEVEL)
