# backend/listing_guard/main.py
import importlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from listing_guard import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Listing Guard API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# (module, required): a required router that fails to import stops startup,
# an optional one is logged and skipped
ROUTERS = [
    ("listing_guard.api.listing_analysis", True),   # /api/listing/analyze, /api/listing/backend-keywords
    ("listing_guard.api.assistant", False),         # /api/assistant/chat (needs the LLM SDK)
]

mounted_routers = []


def _mount(module_path: str, required: bool):
    try:
        mod = importlib.import_module(module_path)
    except Exception as e:
        if required:
            raise
        logging.warning("Skip router %s due to error: %s", module_path, e)
        return
    app.include_router(mod.router)
    mounted_routers.append(module_path.rsplit(".", 1)[-1])
    logging.info("Mounted router: %s", module_path)


for module_path, required in ROUTERS:
    _mount(module_path, required)


@app.get("/api/health")
def health():
    return {"status": "ok", "routers": mounted_routers}
