"""Collectible card models"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Rarity(str, Enum):
    """Card rarity tiers, in rising scarcity"""
    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"

    @property
    def multiplier(self) -> int:
        """Value multiplier applied to the rolled base value"""
        return RARITY_MULTIPLIERS[self]


RARITY_MULTIPLIERS = {
    Rarity.COMMON: 1,
    Rarity.RARE: 5,
    Rarity.EPIC: 20,
    Rarity.LEGENDARY: 100,
}


class Card(BaseModel):
    """A drawn card; immutable once created"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    title: str
    rarity: Rarity
    value: int = Field(ge=0)
    image_url: Optional[str] = None
    description: str = ""
    obtained_at: int  # ms epoch
