from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import sys
import traceback
import json
from typing import Callable

from nepriziv.api.v1.api import api_router
from nepriziv.core.config import settings
from nepriziv.db.base import init_db
from nepriziv.infrastructure.response import standard_response, error_response, validation_error_response
from nepriziv.infrastructure.storage.object_storage import StorageFactory
from nepriziv.schemas.common import format_validation_errors

# 降低watchfiles日志级别，避免频繁输出
logging.getLogger('watchfiles').setLevel(logging.ERROR)
logging.getLogger('watchfiles.main').setLevel(logging.ERROR)
logging.getLogger('watchdog').setLevel(logging.ERROR)

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="НеПризыв: API портала помощи призывникам"
)

# 配置CORS - 必须在其他中间件之前添加
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"]
)

DEFAULT_ERROR_MSG = "Ошибка запроса"


def _is_envelope(body) -> bool:
    return isinstance(body, dict) and {"code", "data", "msg"} <= body.keys()


def _needs_wrapping(request: Request, response: Response) -> bool:
    if request.method == "OPTIONS" or response.status_code == 204:
        return False
    if response.headers.get("content-length") == "0":
        return False
    # 只包装JSON，SSE流和文件下载原样返回
    return response.headers.get("content-type", "").startswith("application/json")


def _envelope_for(status_code: int, body) -> dict:
    """4xx/5xx 的 {"detail"} 转成 code=状态码 的错误信封，其余作为data包装"""
    if status_code >= 400:
        detail = body.get("detail") if isinstance(body, dict) else None
        return error_response(msg=detail if isinstance(detail, str) else DEFAULT_ERROR_MSG, code=status_code)
    return standard_response(data=body, code=200)


async def _read_body(response: Response) -> bytes:
    # call_next 返回的是流式响应
    body_bytes = b""
    async for chunk in response.body_iterator:
        body_bytes += chunk if isinstance(chunk, bytes) else chunk.encode()
    return body_bytes


# 请求体校验失败统一返回 code=400 + 字段错误列表
@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    details = format_validation_errors(exc.errors())
    logger.info(f"请求校验失败 {request.url.path}: {details}")
    return JSONResponse(content=validation_error_response(details), status_code=200)


@app.middleware("http")
async def uniform_response_middleware(request: Request, call_next: Callable) -> Response:
    """
    /api 下的JSON响应统一包装成 {"code", "data", "msg"}，HTTP状态码统一200
    """
    if not request.url.path.startswith(settings.API_V1_STR):
        return await call_next(request)

    try:
        response = await call_next(request)
        if not _needs_wrapping(request, response):
            return response

        body_bytes = await _read_body(response)
        try:
            body = json.loads(body_bytes.decode())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return Response(content=body_bytes, status_code=response.status_code, headers=dict(response.headers))
        if _is_envelope(body):
            return Response(content=body_bytes, status_code=response.status_code, headers=dict(response.headers))

        headers = dict(response.headers)
        headers.pop("content-length", None)
        headers.pop("content-type", None)
        return JSONResponse(content=_envelope_for(response.status_code, body), status_code=200, headers=headers)
    except Exception as e:
        logger.error(f"处理请求 {request.method} {request.url.path} 出错: {str(e)}")
        logger.error(traceback.format_exc())
        return JSONResponse(content=error_response(msg="Внутренняя ошибка сервера", code=500), status_code=200)


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.on_event("startup")
async def startup_db_client():
    """启动时建表并确保MinIO存储桶存在，任一失败只记录日志"""
    try:
        init_db()
        logger.info("数据库初始化成功")
    except Exception as e:
        logger.error(f"数据库初始化失败: {str(e)}")
        logger.error(traceback.format_exc())

    try:
        StorageFactory.get_default_storage().initialize()
        logger.info("MinIO初始化完成")
    except Exception as e:
        logger.error(f"MinIO初始化失败: {str(e)}")


@app.get("/")
async def root():
    return standard_response(data={"status": "online", "version": settings.VERSION}, msg="НеПризыв API работает")
