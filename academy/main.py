import logging

from fastapi import FastAPI

from academy.config import settings
from academy.legacy.router import router as legacy_router
from academy.shop.router import router as shop_router


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

app = FastAPI(title="Academy Platform", version="0.1.0")
app.include_router(legacy_router)
app.include_router(shop_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "legacy": {
            "players": "/legacy/players",
            "match": "/legacy/match",
            "leads": "/legacy/leads",
            "leads_detail": "/legacy/leads/{id}",
            "leads_export": "/legacy/leads/export/csv",
        },
        "shop": {
            "products": "/shop/products",
            "product_detail": "/shop/products/{slug}",
            "orders": "/shop/orders",
            "order_detail": "/shop/orders/{order_number}",
            "order_verify": "/shop/orders/{id}/verify",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
