"""
Pydantic schemas for API request/response models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from relay.errors import REQUIRED_FIELDS, InvalidFieldsError, MissingFieldsError


class PredictionRequest(BaseModel):
    """
    The three inputs forwarded to the scoring service.

    Numeric strings are coerced to float. Advisory client-side ranges are
    slope 0-90 degrees, rainfall 0-500 mm and temperature -50-60 C; they are
    not enforced here.
    """

    slope: float = Field(allow_inf_nan=False)
    rainfall: float = Field(allow_inf_nan=False)
    temperature: float = Field(allow_inf_nan=False)

    @field_validator("slope", "rainfall", "temperature", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("booleans are not numeric inputs")
        return value


def parse_prediction_request(payload: Any) -> PredictionRequest:
    """
    Turn a raw JSON body into a validated PredictionRequest.

    Raises:
        MissingFieldsError: A required field is absent or null.
        InvalidFieldsError: A field is present but not a finite number.
    """
    if not isinstance(payload, dict):
        payload = {}
    missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
    if missing:
        raise MissingFieldsError(missing)

    try:
        return PredictionRequest.model_validate({name: payload[name] for name in REQUIRED_FIELDS})
    except ValidationError as e:
        invalid = sorted({str(err["loc"][0]) for err in e.errors()}, key=REQUIRED_FIELDS.index)
        raise InvalidFieldsError(invalid) from e


class HealthResponse(BaseModel):
    status: str
    backend: str
    pythonML: Any
    error: Optional[str] = None


class PredictionResponse(BaseModel):
    success: bool
    data: Any
    timestamp: str


class HistoryResponse(BaseModel):
    message: str
    data: List[Any]


class ServiceInfo(BaseModel):
    service: str
    version: str
    endpoints: Dict[str, str]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
    message: Optional[str] = None
