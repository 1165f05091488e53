from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn

from models.basemodel import BaseModel
from config.appsettings import Settings
from config.database import engine
from middlewares.LoggerMiddleware import RequestLoggingMiddleware
from routes.comments import router as CommentRouter
from routes.pages import router as PageRouter


logging.basicConfig(
    level=Settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        if Settings.DB_RECREATE:
            await conn.run_sync(BaseModel.metadata.drop_all)
        await conn.run_sync(BaseModel.metadata.create_all)
    logger.info(f"{Settings.APP_NAME} {Settings.APP_VERSION} started")

    yield

    await engine.dispose()
    logger.info("Application shutdown completed")


app = FastAPI(
    title=Settings.APP_NAME,
    version=Settings.APP_VERSION,
    description=Settings.APP_DESCRIPTION,
    docs_url="/api/docs" if Settings.DEBUG else None,
    redoc_url="/api/redoc" if Settings.DEBUG else None,
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

app.add_middleware(
    RequestLoggingMiddleware,
    exclude_paths=["/api/docs", "/api/redoc", "/openapi.json"],
    log_request_body=Settings.DEBUG
)

app.include_router(CommentRouter)
app.include_router(PageRouter)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=Settings.DEBUG)
