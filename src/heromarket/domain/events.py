from dataclasses import dataclass


@dataclass
class CharacterCreated:
    character_id: int
    owner: str
    character_class: str
    created_at: int


@dataclass
class CharacterTrained:
    character_id: int
    stat: str
    gain: int
    trained_at: int


@dataclass
class CharacterListed:
    listing_id: int
    character_id: int
    seller: str
    price: int
    listed_at: int


@dataclass
class CharacterPurchased:
    listing_id: int
    character_id: int
    seller: str
    buyer: str
    price: int
