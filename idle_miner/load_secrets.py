import os
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")
# Full SQLAlchemy URL; overrides every DB_* setting below when present.
database_url = os.getenv("DATABASE_URL")
# Set DB_BACKEND=sqlite to run against a local SQLite file instead of PostgreSQL.
db_backend = os.getenv("DB_BACKEND", "postgres")

redis_host = os.getenv("REDIS_HOST", "redis")
redis_port = int(os.getenv("REDIS_PORT", "6379"))

network_step_seconds = float(os.getenv("NETWORK_STEP_SECONDS", "600"))
boost_sweep_minutes = float(os.getenv("BOOST_SWEEP_MINUTES", "60"))
# Unset means offline catch-up is not capped.
max_offline_seconds = (
    float(os.environ["MAX_OFFLINE_SECONDS"]) if os.getenv("MAX_OFFLINE_SECONDS") else None
)
network_seed = int(os.environ["NETWORK_SEED"]) if os.getenv("NETWORK_SEED") else None

if __name__ == "__main__":
    print(user, host, port, db_name, db_backend, redis_host, redis_port)
