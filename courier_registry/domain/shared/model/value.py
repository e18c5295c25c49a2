from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable, compared by value. Base for points, probe results and GeoJSON shapes."""

    model_config = ConfigDict(frozen=True)
