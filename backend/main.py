from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from db.database import create_db_and_tables, engine
from db.migrations import add_missing_price_columns
from core.logging_setup import setup_logging
from routers.prices import router as prices_router
from contextlib import asynccontextmanager


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await create_db_and_tables()
    await add_missing_price_columns(engine)
    yield


app = FastAPI(
    title="Outlet Stock API",
    description="Latest stock batch prices for products and delivery history",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Latest unit price routes
app.include_router(prices_router, tags=["prices"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
