import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config, CONFIG_DIR
from routes import cards_router, sessions_router, stats_router
from utils.session import SessionRegistry

logger = logging.getLogger(__name__)

def configure_logging(config: dict) -> None:
    logging.basicConfig(
        level=config.get("logging", {}).get("level", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init DB and config
    config = load_config()  # Ensures config exists
    configure_logging(config)
    init_db()
    app.state.sessions = SessionRegistry()
    yield
    # Open sessions are discarded; committed reviews stay in the DB
    logger.info("Shutting down with %d open sessions", len(app.state.sessions))

app = FastAPI(title="spacedeck", description="Spaced-repetition review sessions", lifespan=lifespan)
app.state.sessions = SessionRegistry()

# Include routers
app.include_router(cards_router, prefix="/cards", tags=["cards"])
app.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
app.include_router(stats_router, prefix="/stats", tags=["stats"])

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="spacedeck API")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    args = parser.parse_args()
    if args.init:
        configure_logging(load_config())  # Ensures config is copied if missing
        init_db()
        print(f"DB initialized and config copied to {CONFIG_DIR}")
        sys.exit(0)
    # Run server
    uvicorn.run("main:app", host="127.0.0.1", port=args.port, reload=args.dev, log_level="info")
