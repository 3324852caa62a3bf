"""Run with: python -m digify_server"""

import uvicorn

from digify_server.config import settings
from digify_server.main import app

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
