import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Base, engine
from .resources import get_item_bank, get_matcher
from .settings import settings
from .routers import health
from .routers import tools
from .routers.health import SERVICE_VERSION
from . import models  # noqa: F401  registers tables on Base


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=getattr(logging, (level or "INFO").upper(), logging.INFO),
		format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
	)


configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="MCQ Assessment API", version=SERVICE_VERSION)
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_methods=["GET", "POST", "OPTIONS"],
	allow_headers=["Content-Type"],
)
app.include_router(health.router)
app.include_router(tools.router)


@app.on_event("startup")
async def startup_event():
	Base.metadata.create_all(bind=engine)
	# Load item bank and alias table once; bad data files should stop startup
	bank = get_item_bank()
	get_matcher()
	logger.info(
		"MCQ service %s ready: %d items across %d topics, generation %s",
		SERVICE_VERSION,
		len(bank),
		len(bank.topics()),
		"enabled" if settings.generation_enabled else "disabled",
	)
