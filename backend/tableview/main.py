from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import settings
from .logging_config import setup_logging
from .api import router as api_router
from .pages_api import router as pages_router

setup_logging(settings.LOG_LEVEL)

app = FastAPI(title="TableView API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# endpoints registered
app.include_router(api_router)
app.include_router(pages_router)


# Optional root
@app.get("/")
def root():
    return {"name": "TableView API"}
