import os


os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STATS_DB_URL", "")
os.environ.setdefault("STATS_ACQUISITION_WORKERS", "2")
