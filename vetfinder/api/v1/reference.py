from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from vetfinder.api.v1.schemas import CountySchema, LocalitiesSchema
from vetfinder.application.ports.company_api import CompanyApiPort
from vetfinder.domain.geo import ROMANIAN_COUNTIES, find_county, localities_for
from vetfinder.wiring.dependencies import get_company_api

router = APIRouter(prefix="/reference")


@router.get("/counties", response_model=list[CountySchema])
def list_counties():
    return [CountySchema.from_entity(c) for c in ROMANIAN_COUNTIES]


@router.get("/counties/{code}/localities", response_model=LocalitiesSchema)
def list_localities(code: str):
    county = find_county(code)
    if county is None:
        raise HTTPException(status_code=404, detail=f"Unknown county: {code}")
    return LocalitiesSchema(county=CountySchema.from_entity(county), localities=localities_for(county.code))


@router.get("/service-templates", response_model=list[dict[str, Any]])
def list_service_templates(api: CompanyApiPort = Depends(get_company_api)):
    # Empty when the backend has no templates or cannot be reached.
    return api.get_service_templates()
