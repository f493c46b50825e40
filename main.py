import uvicorn
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import engine, Base
from shared.config.settings import settings
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.payment_service import models as payment_models  # noqa: F401

from services.auth_service.router import router as auth_router
from services.payment_service.router import router as payment_router

app = FastAPI(title="WebPay Payments", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "webpay_payments")

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(payment_router)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "webpay_payments", "status": "running"}


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
