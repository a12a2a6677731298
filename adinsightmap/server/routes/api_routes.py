"""
Service routes: competitor analysis, ad image scraping, insight generation.

All routes are mounted under /api by main.py. Input problems answer 400
``{error}``; upstream failures answer 500 ``{error, details}``.
"""
from __future__ import annotations

import json
from logging import getLogger
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..state import AppState, get_app_state

logger = getLogger(__name__)

router = APIRouter()


def error_response(status_code: int, error: str, details: str = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Decode the request body; anything but a JSON object reads as empty."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


# ── POST /analyze ─────────────────────────────────────────────────────────────

@router.post("/analyze")
async def analyze(request: Request, state: AppState = Depends(get_app_state)):
    body = await read_json_object(request)
    company_name = body.get("companyName")
    if not _non_empty_str(company_name):
        return error_response(400, "Company name is required")

    try:
        competitors = await state.analyzer.analyze_competitors(company_name.strip())
    except Exception as exc:
        logger.error(f"Analyze API error: {exc}")
        return error_response(500, "Failed to analyze competitors", str(exc) or "Unknown error")

    return {"competitors": [c.to_dict() for c in competitors]}


# ── POST /scrape ──────────────────────────────────────────────────────────────

@router.post("/scrape")
async def scrape(request: Request, state: AppState = Depends(get_app_state)):
    body = await read_json_object(request)
    brand_name = body.get("brandName")
    if not _non_empty_str(brand_name):
        return error_response(400, "Brand name is required")

    logger.info(f"Scraping ads for: {brand_name}")
    try:
        urls = await state.fetch_chain.fetch_image_urls(brand_name)
    except Exception as exc:
        logger.error(f"Scrape API error: {exc}")
        return error_response(500, "Failed to scrape ads", str(exc) or "Unknown error")

    logger.info(f"Found {len(urls)} ads for {brand_name}")
    return {"brandName": brand_name, "images": urls}


# ── POST /insight ─────────────────────────────────────────────────────────────

@router.post("/insight")
async def insight(request: Request, state: AppState = Depends(get_app_state)):
    body = await read_json_object(request)
    brand_name = body.get("brandName")
    images = body.get("images")
    if not _non_empty_str(brand_name) or not isinstance(images, list):
        return error_response(400, "Brand name and images are required")

    try:
        bundle = await state.generator.generate_insights(brand_name, [str(image) for image in images])
    except Exception as exc:
        logger.error(f"Insight API error: {exc}")
        return error_response(500, "Failed to generate insights", str(exc) or "Unknown error")

    return {"insights": bundle.to_dict()}
