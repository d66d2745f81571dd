import logging

from fastapi import FastAPI

from betonit.api.routes import router
from betonit.config import GAME_NAMESPACE, settings_from_env

app = FastAPI(title="betonit", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings_from_env().log_level)
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "betonit", "version": "0.1.0", "namespace": GAME_NAMESPACE}
