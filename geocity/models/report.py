"""
Pydantic models for citizen incident reports.
These models handle validation for report submission and responses.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from enum import Enum


class EmergencyType(str, Enum):
    MEDICAL = "MEDICAL"
    LAW_ENFORCEMENT = "LAW_ENFORCEMENT"
    FIRE_HAZARD = "FIRE_HAZARD"
    ENVIRONMENTAL = "ENVIRONMENTAL"


class Authenticity(str, Enum):
    REAL = "REAL"
    AI_GENERATED = "AI_GENERATED"
    UNCERTAIN = "UNCERTAIN"


class EmergencyLevel(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Category(str, Enum):
    SAFE = "SAFE"
    WARNING = "WARNING"
    DANGER = "DANGER"


class DeviceType(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class PhotoDetails(BaseModel):
    """Metadata of the photo as picked on the client."""
    name: str = Field(..., min_length=1)
    size: int = Field(..., gt=0, description="Size in bytes")
    type: str = Field(..., min_length=1, description="MIME type, e.g. image/jpeg")
    last_modified: Optional[str] = Field(None, alias="lastModified")

    model_config = {"populate_by_name": True}


class DeviceInfo(BaseModel):
    """Best-effort description of the submitting device."""
    public_ip: str = Field(..., min_length=1, alias="publicIP")
    user_agent: str = Field(..., min_length=1, alias="userAgent")
    screen_resolution: Optional[str] = Field(None, alias="screenResolution")
    timezone: Optional[str] = None
    language: Optional[str] = None
    timestamp: str = Field(..., min_length=1)
    device_type: DeviceType = Field(DeviceType.DESKTOP, alias="deviceType")

    model_config = {"populate_by_name": True}


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ImageAnalysis(BaseModel):
    """
    AI assessment of a report photo.
    Advisory only: it drives the marker priority, never the report status.
    """
    authenticity: Authenticity = Authenticity.UNCERTAIN
    description: str = ""
    human_readable_description: str = Field("", alias="humanReadableDescription")
    emergency_level: EmergencyLevel = Field(EmergencyLevel.NONE, alias="emergencyLevel")
    category: Category = Category.SAFE
    reasoning: str = ""
    confidence: float = Field(0, ge=0, le=100)

    model_config = {"populate_by_name": True}

    def to_firestore(self) -> Dict[str, Any]:
        return {
            "authenticity": self.authenticity.value,
            "description": self.description,
            "humanReadableDescription": self.human_readable_description,
            "emergencyLevel": self.emergency_level.value,
            "category": self.category.value,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
        }


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    Field aliases follow the camelCase payload the web client sends.
    """
    photo: str = Field(..., description="Base64 encoded image data URI")
    photo_details: PhotoDetails = Field(..., alias="photoDetails")
    location: str = Field(..., min_length=1, max_length=500)
    description: str = Field("", max_length=2000)
    is_emergency: bool = Field(..., alias="isEmergency")
    emergency_type: Optional[EmergencyType] = Field(None, alias="emergencyType")
    device_info: DeviceInfo = Field(..., alias="deviceInfo")
    image_analysis: Optional[ImageAnalysis] = Field(None, alias="imageAnalysis")
    expiration_hours: Optional[float] = Field(None, gt=0, alias="expirationHours")
    user_id: Optional[str] = Field(None, alias="userId")
    coordinates: Optional[Coordinates] = None

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "photo": "data:image/jpeg;base64,/9j/4AAQSkZJRg...",
                "photoDetails": {"name": "crash.jpg", "size": 20480, "type": "image/jpeg",
                                 "lastModified": "2024-05-01T10:00:00Z"},
                "location": "MG Road, Bengaluru",
                "description": "Two cars collided near the signal",
                "isEmergency": True,
                "emergencyType": "MEDICAL",
                "deviceInfo": {"publicIP": "203.0.113.10", "userAgent": "Mozilla/5.0",
                               "timestamp": "2024-05-01T10:00:05Z", "deviceType": "mobile"},
                "expirationHours": 2,
                "userId": "uid_123",
            }
        },
    }

    @field_validator("photo")
    @classmethod
    def photo_must_be_data_uri(cls, value: str) -> str:
        if not value.startswith("data:image/"):
            raise ValueError("photo must be a base64 image data URI (data:image/...)")
        return value

    @model_validator(mode="after")
    def emergency_requires_type(self):
        if self.is_emergency and self.emergency_type is None:
            raise ValueError("emergencyType is required when isEmergency is true")
        return self


class ReportSubmissionResult(BaseModel):
    """Payload returned in `data` after a successful submission."""
    report_id: str = Field(..., alias="reportId")
    image_url: str = Field(..., alias="imageUrl")
    filename: str
    location: str
    coordinates: Optional[Coordinates] = None
    is_emergency: bool = Field(..., alias="isEmergency")
    emergency_type: Optional[EmergencyType] = Field(None, alias="emergencyType")
    image_analysis: Optional[Dict[str, Any]] = Field(None, alias="imageAnalysis")
    expiration_hours: float = Field(..., alias="expirationHours")
    user_id: Optional[str] = Field(None, alias="userId")
    status: str = "pending"
    priority: str

    model_config = {"populate_by_name": True}


class ImageAnalysisRequest(BaseModel):
    image_data_uri: str = Field(..., alias="imageDataUri")

    model_config = {"populate_by_name": True}

    @field_validator("image_data_uri")
    @classmethod
    def must_be_data_uri(cls, value: str) -> str:
        if not value.startswith("data:image/"):
            raise ValueError("imageDataUri must be a base64 image data URI")
        return value
