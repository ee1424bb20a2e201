import time
from typing import Callable, Optional, TypeVar
from sqlalchemy.exc import OperationalError, DBAPIError
from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# 接続断・タイムアウトなど一時的なエラーのみリトライ対象
RETRYABLE_ERRORS = (OperationalError, TimeoutError, ConnectionError)

def is_retryable_error(error: Exception) -> bool:
    if isinstance(error, RETRYABLE_ERRORS):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    return False

def with_retry(
    operation: Callable[[], T],
    max_retries: Optional[int] = None,
    delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    operation を実行し、一時的なエラーの場合は指数バックオフでリトライする。
    待ち時間は delay * 2 ** (attempt - 1)。ドメインエラーは即座に再送出する。
    """
    max_retries = max_retries if max_retries is not None else settings.QUERY_MAX_RETRIES
    delay = delay if delay is not None else settings.QUERY_RETRY_DELAY_SECONDS

    for attempt in range(1, max_retries + 1):
        try:
            return operation()
        except Exception as e:
            if not is_retryable_error(e):
                raise
            if attempt >= max_retries:
                logger.error(f"Query failed after {attempt} attempts: {e}")
                raise
            wait = delay * 2 ** (attempt - 1)
            logger.warning(f"Transient query error (attempt {attempt}/{max_retries}), retrying in {wait:.1f}s: {e}")
            sleep(wait)
