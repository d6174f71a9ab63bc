# main.py
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from controller.controller_dependencies import build_app_services
from util.errors import ExtractionError
from util.logger import init_logger


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    try:
        logger = init_logger()
        print(f"{Color.GREEN}Initializing...{Color.RESET}")
        services = build_app_services()
        removed = await services.cleanup_expired()
        logger.info("startup.cache.cleanup removed=%d", removed)
        fastApi.state.services = services
        print(f"{Color.BLUE}Server Started{Color.RESET}")
    except Exception as e:
        print("Failed to initialize services:", e)
        raise

    try:
        yield
    finally:
        try:
            await services.aclose()
        except Exception as e:
            print("Error closing caches:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    return JSONResponse(
        status_code=502,
        content={
            "ok": False,
            "error": "extraction_failed",
            "message": str(exc),
        },
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
