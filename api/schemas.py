from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ListFiltersModel(BaseModel):
    search_term: str = ""
    region: str = "All"
    sort_field: Literal["name", "region", "population", "homicide_rate"] = "homicide_rate"
    sort_order: Literal["asc", "desc"] = "desc"


class CountryRow(BaseModel):
    rank: int
    name: str
    code: str
    region: str
    population: int
    flag_url: Optional[str] = None
    homicide_rate: float
    color: Optional[str] = None
    text_color: Optional[str] = None


class CountryListResponse(BaseModel):
    year: str
    filters: ListFiltersModel
    total: int
    shown: int
    max_rate: float
    regions: List[str]
    rows: List[CountryRow]
    chart: Optional[Dict[str, Any]] = None


class CountryDetailModel(BaseModel):
    official_name: str
    common_name: str
    flag_url: Optional[str] = None
    region: Optional[str] = None
    subregion: Optional[str] = None
    population: int
    capitals: List[str] = Field(default_factory=list)
    code: str
    homicide_rate: Optional[float] = None


class CountryDetailResponse(BaseModel):
    year: str
    country: CountryDetailModel
    has_data: bool
    max_rate: float
    color: Optional[str] = None
    text_color: Optional[str] = None


class YearsResponse(BaseModel):
    years: List[str]
    default: str


class ErrorResponse(BaseModel):
    error: str
    type: str
