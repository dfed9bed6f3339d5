from fastapi import FastAPI

from . import __version__
from .reconciliation.api import router as reconciliation_router

app = FastAPI(title="Reconciliation Insights API", version=__version__)

app.include_router(reconciliation_router)


@app.get("/health")
async def health():
    return {"ok": True}
