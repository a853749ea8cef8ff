from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..item_bank import ItemBank
from ..matching import TopicMatcher
from ..resources import get_generator_factory, get_item_bank, get_matcher
from ..tools import TOOLS, ToolArgumentError, ToolContext, UnknownToolError, call_tool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tools"])


class ToolCallRequest(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    success: bool = True
    result: Dict[str, Any]


def get_tool_context(
    db: Session = Depends(get_db),
    bank: ItemBank = Depends(get_item_bank),
    matcher: TopicMatcher = Depends(get_matcher),
    generator_factory=Depends(get_generator_factory),
) -> ToolContext:
    return ToolContext(
        db,
        bank,
        matcher,
        generator_factory=generator_factory,
        generation_enabled=generator_factory is not None,
    )


@router.get("/tools")
def list_tools():
    return {
        "tools": [
            {"name": name, "description": description, "input_schema": model.model_json_schema()}
            for name, (model, _, description) in TOOLS.items()
        ]
    }


@router.post("/api/tools/call", response_model=ToolCallResponse)
async def call(req: ToolCallRequest, ctx: ToolContext = Depends(get_tool_context)):
    try:
        result = await call_tool(ctx, req.name, req.arguments)
    except (UnknownToolError, ToolArgumentError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Tool %s failed", req.name)
        raise HTTPException(status_code=500, detail=str(e))
    return ToolCallResponse(result=result)
