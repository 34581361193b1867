import logging

from fastapi import FastAPI

from .db import Base, engine
from .settings import settings
from .routers import health
from .routers import auth
from .routers import practice
from .routers import sessions

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="DevSpeak AI API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(practice.router)
app.include_router(sessions.router)


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
