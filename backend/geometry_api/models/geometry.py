"""Geometry record model."""
from sqlalchemy import CheckConstraint, Index, Integer, SmallInteger, String, Text, func
from geoalchemy2 import Geometry
from sqlalchemy.orm import Mapped, mapped_column

from geometry_api.database import Base


class GeometryItem(Base):
    """Named point, linestring or polygon stored in EPSG:4326."""

    __tablename__ = "geometries"
    __table_args__ = (
        CheckConstraint("type IN (1, 2, 3)", name="ck_geometries_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[int] = mapped_column(SmallInteger, nullable=False)  # 1=POINT, 2=LINESTRING, 3=POLYGON
    wkt: Mapped[str] = mapped_column(Text, nullable=False)

    # Spatial data (PostGIS), GiST index created by geoalchemy2
    geom = mapped_column(Geometry("GEOMETRY", srid=4326, spatial_index=True), nullable=False)


# Case-insensitive name uniqueness backs the application-level check
Index("uq_geometries_name_lower", func.lower(GeometryItem.name), unique=True)
