import logging
import secrets

from fastapi import Request
from src.fuel_ledger.config import get_settings
from src.fuel_ledger.middleware.exceptions import InvalidAPIKeyError, MissingAPIKeyError

logger = logging.getLogger(__name__)


async def validate_api_key(request: Request) -> str:
    """Reject requests whose API key header is missing or wrong.

    Returns the accepted key so routes can depend on it as the caller identity.
    """
    settings = get_settings()
    header = settings.FASTAPI_API_KEY_HEADER
    api_key = request.headers.get(header)
    if not api_key:
        logger.warning("Missing API key on %s %s", request.method, request.url.path)
        raise MissingAPIKeyError(header)
    if not secrets.compare_digest(api_key, settings.FASTAPI_API_KEY):
        logger.warning("Invalid API key on %s %s", request.method, request.url.path)
        raise InvalidAPIKeyError()
    return api_key
