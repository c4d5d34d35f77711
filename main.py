"""
Academy CG Backend
Lesson catalog, user registration and YooKassa subscription payments
"""

from datetime import datetime
from pathlib import Path
import logging
import traceback

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

# Import routers
from routers.billing_router import billing_router
from routers.lesson_router import lesson_router
from routers.user_router import user_router
from database import init_db, close_db, AsyncSessionLocal
from services.lesson_service import LessonService
from config.settings import settings, LOGS_DIR

# ============================================================================
# LOGGING
# ============================================================================

LOGS_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / "app.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# ============================================================================
# FASTAPI APP SETUP
# ============================================================================

app = FastAPI(title="Academy CG Backend")


# Uncaught exception middleware - logs all unhandled exceptions and returns 500
class UncaughtExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Uncaught exception: {e}\n{traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error"}
            )


app.add_middleware(UncaughtExceptionMiddleware)

# CORS MUST be near the bottom
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# STARTUP / SHUTDOWN
# ============================================================================

@app.on_event("startup")
async def check_env_keys_on_startup():
    """Warn about missing integration settings (non-fatal)"""
    if not settings.gateway_configured:
        logger.warning("YOOKASSA_SHOP_ID / YOOKASSA_SECRET_KEY not set. Payments run in test mode.")
    if not settings.telegram_bot_token:
        logger.warning("TELEGRAM_BOT_TOKEN not set. Subscription notifications are disabled.")


@app.on_event("startup")
async def initialize_database():
    """Create tables and seed the lesson catalog on first run."""
    try:
        await init_db()
        async with AsyncSessionLocal() as session:
            await LessonService(session).seed_lessons()
        logger.info("✅ Database initialized")
    except Exception as e:
        logger.error(f"❌ Database initialization error: {e}", exc_info=True)


@app.on_event("shutdown")
async def shutdown_database():
    await close_db()

# ============================================================================
# ROUTES
# ============================================================================

@app.get("/api/health", tags=["health"])
async def health():
    return {
        "status": "OK",
        "message": "Backend is running!",
        "timestamp": datetime.utcnow().isoformat(),
    }


app.include_router(billing_router)
app.include_router(lesson_router)
app.include_router(user_router)

# Static files (MUST be last - after all API routes)
STATIC_DIR = Path(settings.static_dir)
if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

if __name__ == "__main__":
    import uvicorn
    logger.info(f"🚀 Server running on http://localhost:{settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
