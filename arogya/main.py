# arogya/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from arogya.config import get_settings
from arogya.api.routes import router as api_router


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("arogya")

app = FastAPI(title="Arogya API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # for dev; tighten in prod
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.on_event("startup")
def on_startup() -> None:
    current = get_settings()
    if not current.groq_api_key:
        logger.warning("GROQ_API_KEY is not set; chat replies will fail until it is")
    logger.info("Serving static files from %s", current.static_dir)


app.include_router(api_router, prefix="/api")


@app.get("/{full_path:path}", include_in_schema=False)
def serve_static(full_path: str) -> FileResponse:
    """
    Static files from the static directory; anything else gets the entry page.
    """
    static_dir = get_settings().static_dir.resolve()
    if full_path:
        candidate = (static_dir / full_path).resolve()
        if candidate.is_file() and static_dir in candidate.parents:
            return FileResponse(str(candidate))
    return FileResponse(
        str(static_dir / "index.html"),
        headers={"Cache-Control": "no-store"},
    )


def run() -> None:
    import uvicorn

    current = get_settings()
    uvicorn.run(
        "arogya.main:app",
        host=current.host,
        port=current.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
