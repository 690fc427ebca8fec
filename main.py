from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError

from deckhub.core.config import get_settings
from deckhub.core.biz_response import BizResponse
from deckhub.core.exceptions import AppError
from deckhub.core.logx import logger
from deckhub.storage.database import init_db, notifier
from deckhub.routers import decks, comments, reports, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("database tables ready")
    yield
    notifier.close()


app = FastAPI(title=get_settings().app_name, lifespan=lifespan)


# 依赖（如登录校验）里抛出的业务异常走不到路由的 try/except，这里统一兜底
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return BizResponse(data=None, msg=exc.message, code=exc.code, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return BizResponse(
        data=jsonable_encoder(exc.errors()),
        msg="invalid input",
        code="VALIDATION_ERROR",
        status_code=400,
    )


# 注册路由
app.include_router(decks.decks_router)
app.include_router(comments.comments_router)
app.include_router(reports.reports_router)
app.include_router(users.users_router)

# uvicorn main:app
# uvicorn main:app --reload
@app.get("/")
def root():
    return {"message": f"Welcome to {get_settings().app_name}"}
