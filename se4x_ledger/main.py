import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from se4x_ledger.config import settings
from se4x_ledger.routers import campaigns, dashboard, fleet, planets, research, turns

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="SE4X Ledger",
    description="Turn-by-turn economy, fleet and research tracker for Space Empires 4X",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(campaigns.router)
app.include_router(turns.router)
app.include_router(research.router)
app.include_router(research.catalog_router)
app.include_router(fleet.router)
app.include_router(planets.router)
app.include_router(dashboard.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
