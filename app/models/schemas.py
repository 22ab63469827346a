from pydantic import BaseModel, Field
from typing import Optional, List

from app.models.records import RestaurantRecord


class RestaurantResponse(BaseModel):
    id: str
    name: str
    latitude: float
    longitude: float
    cuisines: List[str] = Field(default_factory=list)
    rating: float
    review_count: int = Field(0, alias="reviewCount")
    image_url: str = Field("", alias="imageUrl")
    yelp_id: Optional[str] = Field(None, alias="yelpId")
    google_place_id: Optional[str] = Field(None, alias="googlePlaceId")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "yelp_sushi-go-san-francisco",
                "name": "Sushi Go",
                "latitude": 37.7749,
                "longitude": -122.4194,
                "cuisines": ["Sushi Bars", "Japanese"],
                "rating": 4.2,
                "reviewCount": 311,
                "imageUrl": "https://s3-media.fl.yelpcdn.com/bphoto/example/o.jpg",
                "yelpId": "sushi-go-san-francisco",
                "googlePlaceId": None,
            }
        }

    @classmethod
    def from_record(cls, record: RestaurantRecord) -> "RestaurantResponse":
        return cls(
            id=record.id,
            name=record.name,
            latitude=record.latitude,
            longitude=record.longitude,
            cuisines=list(record.cuisines),
            rating=record.rating,
            review_count=record.review_count,
            image_url=record.image_url,
            yelp_id=record.yelp_id,
            google_place_id=record.google_place_id,
        )


class SearchResponse(BaseModel):
    results: List[RestaurantResponse]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    database: str
    timestamp: int


class ImageResult(BaseModel):
    url: str
    source: str
    uploaded_by: str = Field(..., alias="uploadedBy")
    uploaded_at: int = Field(..., alias="uploadedAt")
    relevance_score: float = Field(..., alias="relevanceScore")
    thumbnail_url: str = Field("", alias="thumbnailUrl")

    class Config:
        populate_by_name = True


class ImagesResponse(BaseModel):
    restaurant_id: str = Field(..., alias="restaurantId")
    images: List[ImageResult]
    total: int

    class Config:
        populate_by_name = True


class MenuItem(BaseModel):
    name: str
    price: Optional[float] = None
    description: str = ""


class MenuSection(BaseModel):
    name: str
    items: List[MenuItem] = Field(default_factory=list)


class ScanRequest(BaseModel):
    """Menu scan submitted by the mobile client after on-device processing."""
    image_path: Optional[str] = Field(None, alias="imagePath")
    image_base64: Optional[str] = Field(None, alias="imageBase64")
    restaurant_name: Optional[str] = Field(None, alias="restaurantName")
    restaurant_confidence: float = Field(0.0, alias="restaurantConfidence")
    menu_name: Optional[str] = Field(None, alias="menuName")
    extracted_text: str = Field("", alias="extractedText")
    sections: List[MenuSection] = Field(default_factory=list)
    image_quality_score: float = Field(0.0, alias="imageQualityScore")
    processed_on_device: bool = Field(False, alias="processedOnDevice")
    device_processing_time: int = Field(0, alias="deviceProcessingTime")
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "restaurantName": "Sushi Go",
                "menuName": "Dinner Menu",
                "imageQualityScore": 0.9,
                "processedOnDevice": True,
                "deviceProcessingTime": 350,
                "latitude": 37.7749,
                "longitude": -122.4194,
            }
        }


class ProcessingTime(BaseModel):
    device_ms: int = Field(0, alias="deviceMs")
    server_ms: int = Field(..., alias="serverMs")
    total_ms: int = Field(..., alias="totalMs")

    class Config:
        populate_by_name = True


class ScanResponse(BaseModel):
    scan_id: str = Field(..., alias="scanId")
    restaurant: RestaurantResponse
    menu_name: str = Field(..., alias="menuName")
    sections: List[MenuSection]
    images: List[ImageResult] = Field(default_factory=list)
    processing_time: ProcessingTime = Field(..., alias="processingTime")
    quality_score: float = Field(..., alias="qualityScore")

    class Config:
        populate_by_name = True
