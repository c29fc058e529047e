from fastapi import Depends

from lms_dashboard.core.config import Settings, get_settings
from lms_dashboard.services.canvas import CanvasClient


# every request that talks to Canvas gets a fresh client, and it will always close.
async def get_canvas_client(settings: Settings = Depends(get_settings)):
    client = CanvasClient(settings.canvas)
    try:
        yield client
    finally:
        await client.aclose()
