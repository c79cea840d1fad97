"""User progression models"""
from pydantic import BaseModel, Field, field_validator

from habitplanet.models.card import Card

PET_EXP_PER_LEVEL = 100


class User(BaseModel):
    """Player profile: wallet, pet progression, cosmetics and card collection"""
    id: str
    name: str = "Traveler"
    coins: int = Field(default=150, ge=0)
    pet_level: int = Field(default=1, ge=1)
    pet_exp: int = Field(default=20, ge=0)
    pet_name: str = "Gloopy"
    equipped_skin: str = "default"
    inventory: list[str] = Field(default_factory=lambda: ["default"])
    collected_cards: list[Card] = Field(default_factory=list)

    @field_validator("inventory")
    @classmethod
    def dedupe_inventory(cls, value: list[str]) -> list[str]:
        """Inventory is a set of cosmetic ids; keep first-seen order"""
        return list(dict.fromkeys(value))
