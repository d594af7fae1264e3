import os

# In-memory database and no AWS lookups while testing
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PRESENCE_SETTLE_DELAY", "0.05")
