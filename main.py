# main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from tasky.core.config import settings
from tasky.core.database import Base, engine
from tasky.core.errors import register_exception_handlers
# Импортируем роутеры (заодно регистрируются модели в Base.metadata)
from tasky.auth.router import router as auth_router
from tasky.tasks.router import router as tasks_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Creating database tables if missing...")
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="Tasky Backend",
    description="Per-user task management API with email/password and Google sign-in.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Подключаем роутеры
logger.info("Including routers...")
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(tasks_router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Status"])
def root():
    return {"message": "Tasky Backend is running!"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
