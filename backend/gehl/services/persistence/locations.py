# backend/gehl/services/persistence/locations.py
import json
import logging
import uuid

from shapely.geometry import GeometryCollection, mapping, shape
from sqlalchemy.orm import Session

from gehl.errors import NotFoundError, ValidationError
from gehl.services.persistence.base import commit, execute

logger = logging.getLogger(__name__)


def geometry_to_geojson(geometry: dict) -> str:
    """GeoJSON text PostGIS can read. A FeatureCollection becomes a GeometryCollection."""
    if not isinstance(geometry, dict) or "type" not in geometry:
        raise ValidationError(f"not a GeoJSON geometry: {geometry!r}")
    try:
        if geometry["type"] == "FeatureCollection":
            geoms = [shape(f["geometry"]) for f in geometry.get("features", []) if f.get("geometry")]
            if not geoms:
                raise ValidationError("FeatureCollection has no geometries")
            geom = geoms[0] if len(geoms) == 1 else GeometryCollection(geoms)
        elif geometry["type"] == "Feature":
            geom = shape(geometry["geometry"])
        else:
            geom = shape(geometry)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"invalid geometry: {e}") from None
    if geom.is_empty:
        raise ValidationError("empty geometry")
    return json.dumps(mapping(geom))


def create_location(
    db: Session,
    name_primary: str,
    geometry: dict,
    location_id=None,
    country: str = "",
    city: str = "",
    subdivision: str = "",
) -> uuid.UUID:
    params = {
        "location_id": location_id or uuid.uuid4(),
        "country": country or "",
        "city": city or "",
        "name_primary": name_primary,
        "subdivision": subdivision or "",
        "geometry": geometry_to_geojson(geometry),
    }
    execute(
        db,
        """
        INSERT INTO data_collection.location
            (location_id, country, city, name_primary, subdivision, geometry)
        VALUES (:location_id, :country, :city, :name_primary, :subdivision,
                ST_SetSRID(ST_GeomFromGeoJSON(CAST(:geometry AS text)), 4326))
        """,
        params,
    )
    commit(db)
    return params["location_id"]


def get_location(db: Session, location_id) -> dict:
    row = execute(
        db,
        """
        SELECT location_id, country, city, name_primary, subdivision,
               CAST(ST_AsGeoJSON(geometry) AS json) AS geometry
        FROM data_collection.location
        WHERE location_id = :location_id
        """,
        {"location_id": location_id},
    ).mappings().first()
    if row is None:
        raise NotFoundError(f"no location found for locationId: {location_id}")
    return dict(row)
