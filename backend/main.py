import os

from dotenv import load_dotenv
from fastapi.openapi.utils import get_openapi

# Load environment variables before the app reads its settings
load_dotenv()

from app.main import app  # noqa: E402

OPENAPI_TAGS = [
    {"name": "auth", "description": "Phone + password login and the current account."},
    {"name": "wallet", "description": "Balance, recharges, withdrawals and the transaction log."},
    {"name": "bookings", "description": "Booking requests and their status lifecycle."},
    {"name": "workers", "description": "Worker job lists, dashboards and public ratings."},
    {"name": "contractors", "description": "Contractor request queues and team dashboard."},
    {"name": "customers", "description": "Customer dashboard."},
    {"name": "ratings", "description": "One rating per completed booking."},
    {"name": "admin", "description": "Administrative overrides and platform statistics."},
]


def custom_openapi() -> dict:
    """Return the OpenAPI schema with tag descriptions for every router."""
    if app.openapi_schema:
        return app.openapi_schema
    app.openapi_schema = get_openapi(
        title=app.title,
        version=os.getenv("APP_VERSION", "0.1.0"),
        description="Marketplace API for worker bookings, customer wallets and ratings.",
        routes=app.routes,
        tags=OPENAPI_TAGS,
    )
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("UVICORN_RELOAD", "1") == "1",
        workers=int(os.getenv("UVICORN_WORKERS", "1")),
        timeout_keep_alive=int(os.getenv("UVICORN_KEEPALIVE", "65")),
    )
