from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import CountryDetailResponse, CountryListResponse, ErrorResponse, ListFiltersModel, YearsResponse
from homicide.config import get_settings
from homicide.data import YEARS, FetchError, load_country_detail, load_country_list, normalize_year
from homicide.filters import ListFilters, normalize_filters
from homicide.logs import configure_logging
from homicide.view_detail import compute_detail_view
from homicide.view_list import compute_list_view


settings = get_settings()
configure_logging(level=settings.log_level, json_logs=settings.log_json, force=False)

app = FastAPI(title="Homicide Rate Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {502: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _year(year: Optional[str] = Query(default=None)) -> str:
    try:
        return normalize_year(year or get_settings().default_year)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _filters(filters: ListFiltersModel = Depends()) -> ListFilters:
    return normalize_filters(filters.model_dump())


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/meta/years", response_model=YearsResponse)
def meta_years():
    return {"years": list(YEARS), "default": get_settings().default_year}


@app.get("/countries", response_model=CountryListResponse, responses=ERROR_RESPONSES)
def countries(year: str = Depends(_year), filters: ListFilters = Depends(_filters)):
    try:
        df = load_country_list(year)
        return compute_list_view(filters, df, year=year)
    except FetchError as exc:
        return _error(502, exc)
    except Exception as exc:
        logger.exception("countries failed")
        return _error(500, exc)


@app.get("/countries/{code}", response_model=CountryDetailResponse, responses=ERROR_RESPONSES)
def country_detail(code: str, year: str = Depends(_year)):
    try:
        detail = load_country_detail(code, year)
        return compute_detail_view(detail, year=year, domain_max=get_settings().detail_max_rate)
    except FetchError as exc:
        return _error(502, exc)
    except Exception as exc:
        logger.exception("country_detail failed")
        return _error(500, exc)
