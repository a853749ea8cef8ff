from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db, ping
from ..item_bank import ItemBank
from ..resources import get_generator_factory, get_item_bank
from ..tools import TOOLS

SERVICE_NAME = "mcq-service"
SERVICE_VERSION = "0.3.0"

router = APIRouter(tags=["health"])


@router.get("/")
def health(
	db: Session = Depends(get_db),
	bank: ItemBank = Depends(get_item_bank),
	generator_factory=Depends(get_generator_factory),
):
	return {
		"name": SERVICE_NAME,
		"version": SERVICE_VERSION,
		"status": "ok",
		"database": "connected" if ping(db) else "error",
		"generation_enabled": generator_factory is not None,
		"item_bank": {"items": len(bank), "topics": len(bank.topics())},
		"endpoints": {"health": "/", "tools": "/tools", "call": "/api/tools/call"},
		"tools": list(TOOLS),
	}
