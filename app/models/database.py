from sqlalchemy import Column, Integer, String, Float, BigInteger, Index
from app.database import Base


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String, primary_key=True)  # Namespaced: "yelp_<id>", "google_<place_id>", or seeded
    name = Column(String, nullable=False, index=True)
    latitude = Column(Float, nullable=False, default=0.0)
    longitude = Column(Float, nullable=False, default=0.0)
    cuisines = Column(String, nullable=False, default="")  # Comma-separated, e.g. "Italian,Pizza"
    rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    image_url = Column(String, nullable=False, default="")
    yelp_id = Column(String, nullable=True)  # Yelp business id
    google_place_id = Column(String, nullable=True)  # Google Places place_id

    # Epoch milliseconds, set by the store
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index('idx_restaurants_created_at', 'created_at'),
        Index('idx_restaurants_rating', 'rating'),
    )

    def __repr__(self):
        return f"<Restaurant(id='{self.id}', name='{self.name}', rating={self.rating})>"
