"""HTTP routers; each module exposes ``setup_router(...)`` returning an APIRouter."""
