# bootcamp_api/dependencies.py
# Shared resources live on app.state (built in the lifespan or passed to
# create_app) and reach handlers through these dependencies.

from typing import Annotated

from fastapi import Depends, Request

from bootcamp_api.core.config import Settings
from bootcamp_api.database import Database
from bootcamp_api.utils.geocoder import Geocoder


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


DbDep = Annotated[Database, Depends(get_db)]
GeocoderDep = Annotated[Geocoder, Depends(get_geocoder)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
