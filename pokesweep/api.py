"""
PokéSweep — HTTP Handler Layer

FastAPI routes mapping query parameters onto the scrape service and the
error taxonomy onto status codes:

    InputError        -> 400
    AcquisitionError  -> upstream status when it was an HTTP error, else 502
    anything else     -> 500

Run via:
    uvicorn pokesweep.api:app
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from pokesweep import __version__
from pokesweep.errors import AcquisitionError, InputError
from pokesweep.service import scrape_set

logger = structlog.get_logger(__name__)

SET_SLUG_HINT = "Provide ?setSlug=baseset (or evolvingskies, etc.)"

app = FastAPI(
    title="PokéSweep",
    description="PSA population report scraper for Pokémon TCG sets",
    version=__version__,
)


def _truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() not in ("", "0", "false", "no")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/api/scrapeSet")
async def scrape_set_route(
    setSlug: str | None = Query(None, description="Set slug, e.g. baseset"),
    pokemonName: str | None = Query(None, description="Substring filter on name/details"),
    cardNumber: str | None = Query(None, description="Exact card number, e.g. 4/102"),
    limit: str | None = Query(None, description="Result cap, 1-200"),
    debug: str | None = Query(None, description="Attach internal counts"),
    strategy: str | None = Query(None, description="structural_first | broad_sweep"),
):
    if not setSlug or not setSlug.strip():
        return JSONResponse(status_code=400, content={"error": SET_SLUG_HINT})

    try:
        result = await scrape_set(
            setSlug,
            pokemon_name=pokemonName,
            card_number=cardNumber,
            limit=limit,
            debug=_truthy(debug),
            strategy=strategy,
        )
    except InputError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except AcquisitionError as e:
        status = e.status_code if e.status_code and e.status_code >= 400 else 502
        logger.warning(
            "api_scrape_set_acquisition_failed",
            set_slug=setSlug,
            status_code=status,
            error=str(e),
            source="api",
        )
        return JSONResponse(status_code=status, content={"error": str(e), "hint": e.hint})
    except Exception as e:
        logger.error(
            "api_scrape_set_failed",
            set_slug=setSlug,
            error=str(e),
            error_type=type(e).__name__,
            source="api",
        )
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "hint": "Headless scrape failed"},
        )

    return JSONResponse(status_code=200, content=result.to_response())


@app.get("/api/scrapeCard")
async def scrape_card_route(
    cardName: str | None = Query(None, description="Card name"),
):
    if not cardName:
        return JSONResponse(status_code=400, content={"error": "Please provide a cardName"})
    return {"cardName": cardName}
