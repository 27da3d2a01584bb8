from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

try:
    from .errors import KinshipError
    from .routes.named_relationships import router as named_relationships_router
    from .routes.tree import router as tree_router
    from .routes.unions import router as unions_router
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import KinshipError
    from routes.named_relationships import router as named_relationships_router
    from routes.tree import router as tree_router
    from routes.unions import router as unions_router

app = FastAPI(title="Household Kinship API", version="0.1.0")


@app.exception_handler(KinshipError)
async def kinship_error_handler(request: Request, exc: KinshipError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"ok": "true"}


app.include_router(tree_router)
app.include_router(unions_router)
app.include_router(named_relationships_router)
