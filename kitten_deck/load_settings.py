import os
from dotenv import load_dotenv

load_dotenv()

redis_host = os.getenv("REDIS_HOST", "localhost")
redis_port = int(os.getenv("REDIS_PORT", "6379"))
redis_db = int(os.getenv("REDIS_DB", "0"))
redis_socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0"))
allowed_origins = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
snapshot_interval_seconds = int(os.getenv("SNAPSHOT_INTERVAL_SECONDS", "10"))
log_level = os.getenv("LOG_LEVEL", "INFO").upper()

if __name__ == "__main__":
    print(redis_host, redis_port, redis_db, allowed_origins, snapshot_interval_seconds)
