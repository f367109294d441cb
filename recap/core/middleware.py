"""
中间件配置
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from recap.core.exceptions import RecapException, recap_exception_to_http_exception
from recap.core.logging import api_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """请求日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 生成请求ID
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.time()
        log = api_logger.bind(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown"
        )
        log.info(f"Request started - {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            log.bind(process_time=round(process_time, 4)).error(
                f"Request failed - {request.method} {request.url.path}: {e}"
            )
            raise

        process_time = time.time() - start_time
        log.bind(status_code=response.status_code, process_time=round(process_time, 4)).info(
            f"Request completed - {request.method} {request.url.path} -> {response.status_code}"
        )

        # 添加响应头
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        return response


class ExceptionHandlingMiddleware(BaseHTTPMiddleware):
    """异常处理中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")
        try:
            return await call_next(request)
        except RecapException as exc:
            # 处理自定义异常
            http_exc = recap_exception_to_http_exception(exc)
            level = "WARNING" if http_exc.status_code < 500 else "ERROR"
            api_logger.bind(
                request_id=request_id,
                error_code=exc.code,
                error_type=type(exc).__name__,
                path=request.url.path
            ).log(level, f"Recap exception: {exc.message}")
            return JSONResponse(
                status_code=http_exc.status_code,
                content=http_exc.detail
            )
        except Exception as exc:
            # 处理未预期的异常
            api_logger.bind(
                request_id=request_id,
                error_type=type(exc).__name__,
                path=request.url.path
            ).opt(exception=exc).error(f"Unhandled exception: {exc}")

            return JSONResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": True,
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": str(exc) or "Internal server error",
                    "request_id": request_id
                }
            )
