import uvicorn
from constants import HOST, LOG_FILE, LOG_LEVEL, PORT
from logging_config import setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app
from logging_config import get_logger

logger = get_logger(__name__)

if __name__ == "__main__":
    logger.info(f"Starting signalling server on {HOST}:{PORT}")
    logger.info(f"Health check at http://localhost:{PORT}/health")
    logger.info(f"Debug info at http://localhost:{PORT}/api/debug/rooms")
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)
