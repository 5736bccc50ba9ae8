"""
Verificar que la API esté disponible y respondiendo

Usage:
    python check_connection.py
    API_URL=http://192.168.0.10:3000/api python check_connection.py
"""
import asyncio
import logging

from saldo.application.auth import AuthSession
from saldo.config import get_settings
from saldo.infrastructure.http.client import ApiClient
from saldo.infrastructure.storage.token_storage import TokenStorage

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("check_connection")


async def main() -> int:
    client = ApiClient(TokenStorage(), settings)
    session = AuthSession(client)

    restored = await session.restore()
    logger.info("Stored session: %s", "restored" if restored else "none")
    session.close()

    logger.info("Connecting to %s ...", client.base_url)
    status = await client.check_connection()
    if status["connected"]:
        logger.info("API connected: %s", status.get("data"))
        return 0

    logger.error("API not reachable: %s", status["message"])
    logger.error("Configured URL: %s", status["base_url"])
    logger.error("Tip: with localhost on a device, use the LAN IP of the server host instead")
    return 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
