"""Process entry point for the camera sync service."""
import asyncio
import logging
from pathlib import Path

from camsync.config import get_settings
from camsync.device import YiCameraClient
from camsync.services import CameraSync
from camsync.telemetry.log import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging(settings)
    Path(settings.local_path).mkdir(parents=True, exist_ok=True)

    client = YiCameraClient(
        host=settings.camera_host,
        port=settings.camera_port,
        http_port=settings.camera_http_port,
        timeout=settings.camera_timeout,
    )
    service = CameraSync(settings, client)
    try:
        asyncio.run(service.run_forever())
    except KeyboardInterrupt:
        logger.info("Stopped.")


if __name__ == "__main__":
    main()
