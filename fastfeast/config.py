"""
Runtime configuration, read once from the environment.
"""
import os

# --- DATABASE ---
# Default is an in-memory SQLite database: a restart drops every cart and order.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")

# --- AUTH ---
SECRET_KEY = os.getenv("SECRET_KEY", "fastfeast-dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

# --- PAYMENTS ---
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "inr")

# --- PRICING ---
FREE_DELIVERY_THRESHOLD = float(os.getenv("FREE_DELIVERY_THRESHOLD", 150))
DELIVERY_FEE = float(os.getenv("DELIVERY_FEE", 25))
ESTIMATED_DELIVERY_TIME = os.getenv("ESTIMATED_DELIVERY_TIME", "30-45 mins")

# --- KAFKA ---
# Empty disables the producer; events then only reach websocket listeners.
KAFKA_BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "")
KAFKA_CONNECT_RETRIES = int(os.getenv("KAFKA_CONNECT_RETRIES", 10))
KAFKA_RETRY_DELAY = float(os.getenv("KAFKA_RETRY_DELAY", 5))

# --- APP ---
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))
