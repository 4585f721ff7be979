import time
import inspect
from functools import wraps
from spacerag.core.logger import logger


def track_latency(func):
    """
    Decorator to track latency of async API handlers, including failed ones
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        start = time.time()
        outcome = "ok"
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            outcome = type(e).__name__
            raise
        finally:
            elapsed = (time.time() - start) * 1000
            logger.info(f"{func.__name__} latency: {elapsed:.2f} ms ({outcome})")

    # Preserve original function signature so FastAPI can read parameters correctly
    wrapper.__signature__ = inspect.signature(func)

    return wrapper
