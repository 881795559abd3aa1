import logging

import stripe
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException

from config import PORT, setup_logging
from database import db
from errors import AppError
from routers import conversations, coupons, events, messages, orders, payments, products, shops, users, withdraws

logger = logging.getLogger(__name__)

setup_logging()

app = FastAPI(title="Marketplace API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (users, shops, products, events, coupons, orders, payments, withdraws, conversations, messages):
    app.include_router(module.router)


# Errors

def failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(HTTPException)
async def http_error(request: Request, exc: HTTPException):
    return failure(exc.status_code, str(exc.detail))


@app.exception_handler(AppError)
async def app_error(request: Request, exc: AppError):
    return failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return failure(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return failure(400, f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request"))


@app.exception_handler(stripe.StripeError)
async def stripe_error(request: Request, exc: stripe.StripeError):
    logger.error("Stripe call failed: %s", exc)
    return failure(500, exc.user_message or str(exc) or "Payment failed")


@app.get("/")
def read_root():
    return {"message": "Marketplace API running"}


@app.get("/test")
def test_database():
    """Reports whether MongoDB is reachable and which collections exist."""
    status = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_name": db.name,
        "collections": [],
    }
    try:
        status["collections"] = sorted(db.list_collection_names())[:20]
        status["database"] = "✅ Connected & Working"
    except PyMongoError as e:
        logger.warning("Database check failed: %s", e)
        status["database"] = f"⚠️ Connected but Error: {str(e)[:80]}"
    return status


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
