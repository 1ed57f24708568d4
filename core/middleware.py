"""
Request logging middleware
"""
import time
import uuid
import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log its outcome and latency"""
    
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        caller_id = request.headers.get("X-User-Id", "anonymous")
        
        start_time = time.time()
        logger.info(
            f"Request {request_id}: {request.method} {request.url.path} - caller: {caller_id}"
        )
        
        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request {request_id} failed: {str(e)} - "
                f"Time: {process_time:.3f}s"
            )
            raise
        
        process_time = time.time() - start_time
        logger.info(
            f"Response {request_id}: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )
        
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        
        return response
