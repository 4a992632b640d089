from pydantic import BaseModel, field_validator

from .common import check_length


class TestimonialCreate(BaseModel):
    content: str
    rating: int = 5

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return check_length(v.strip(), 20, 1000, "Отзыв должен содержать минимум 20 символов",
                            "Отзыв не должен превышать 1000 символов")

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Минимальная оценка - 1")
        if v > 5:
            raise ValueError("Максимальная оценка - 5")
        return v
