from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from heromarket.domain.models.character import (
    Character,
    CharacterClass,
    Element,
    Equipment,
    Item,
    Rarity,
    Skill,
    Stat,
    Stats,
    TrainingSession,
)
from heromarket.domain.models.listing import ListingStatus, MarketListing


def stats_to_dict(stats: Stats) -> Dict[str, int]:
    return {
        "strength": int(stats.strength),
        "agility": int(stats.agility),
        "intelligence": int(stats.intelligence),
        "vitality": int(stats.vitality),
        "luck": int(stats.luck),
    }


def stats_from_dict(payload: Mapping[str, Any]) -> Stats:
    return Stats(
        strength=int(payload.get("strength", 0)),
        agility=int(payload.get("agility", 0)),
        intelligence=int(payload.get("intelligence", 0)),
        vitality=int(payload.get("vitality", 0)),
        luck=int(payload.get("luck", 0)),
    )


def _item_to_dict(item: Optional[Item]) -> Optional[Dict[str, Any]]:
    if item is None:
        return None
    return {
        "id": int(item.id),
        "name": item.name,
        "rarity": item.rarity.value,
        "stat_bonus": stats_to_dict(item.stat_bonus),
        "required_level": int(item.required_level),
    }


def _item_from_dict(payload: Optional[Mapping[str, Any]]) -> Optional[Item]:
    if not payload:
        return None
    return Item(
        id=int(payload["id"]),
        name=str(payload["name"]),
        rarity=Rarity(str(payload["rarity"])),
        stat_bonus=stats_from_dict(payload.get("stat_bonus") or {}),
        required_level=int(payload.get("required_level", 1)),
    )


def _skill_to_dict(skill: Skill) -> Dict[str, Any]:
    return {
        "id": int(skill.id),
        "name": skill.name,
        "damage": int(skill.damage),
        "cooldown": int(skill.cooldown),
        "element": skill.element.value,
        "mastery_level": int(skill.mastery_level),
    }


def _skill_from_dict(payload: Mapping[str, Any]) -> Skill:
    return Skill(
        id=int(payload["id"]),
        name=str(payload["name"]),
        damage=int(payload.get("damage", 0)),
        cooldown=int(payload.get("cooldown", 0)),
        element=Element(str(payload["element"])),
        mastery_level=int(payload.get("mastery_level", 0)),
    )


def character_to_dict(character: Character) -> Dict[str, Any]:
    return {
        "id": int(character.id),
        "owner": character.owner,
        "name": character.name,
        "level": int(character.level),
        "experience": int(character.experience),
        "class": character.character_class.value,
        "stats": stats_to_dict(character.stats),
        "skills": [_skill_to_dict(skill) for skill in character.skills],
        "equipment": {
            "weapon": _item_to_dict(character.equipment.weapon),
            "armor": _item_to_dict(character.equipment.armor),
            "accessory": _item_to_dict(character.equipment.accessory),
        },
        "training_history": [
            {"timestamp": int(row.timestamp), "stat": row.stat_trained.value, "gain": int(row.gain)}
            for row in character.training_history
        ],
        "creation_date": int(character.creation_date),
        "last_training": int(character.last_training),
    }


def character_from_dict(payload: Mapping[str, Any]) -> Character:
    equipment = payload.get("equipment") or {}
    return Character(
        id=int(payload["id"]),
        owner=str(payload["owner"]),
        name=str(payload["name"]),
        character_class=CharacterClass.normalize(payload["class"]),
        stats=stats_from_dict(payload.get("stats") or {}),
        level=int(payload.get("level", 1)),
        experience=int(payload.get("experience", 0)),
        skills=[_skill_from_dict(row) for row in payload.get("skills") or []],
        equipment=Equipment(
            weapon=_item_from_dict(equipment.get("weapon")),
            armor=_item_from_dict(equipment.get("armor")),
            accessory=_item_from_dict(equipment.get("accessory")),
        ),
        training_history=[
            TrainingSession(
                timestamp=int(row["timestamp"]),
                stat_trained=Stat.normalize(row["stat"]),
                gain=int(row["gain"]),
            )
            for row in payload.get("training_history") or []
        ],
        creation_date=int(payload.get("creation_date", 0)),
        last_training=int(payload.get("last_training", 0)),
    )


def listing_to_dict(listing: MarketListing) -> Dict[str, Any]:
    return {
        "id": int(listing.id),
        "character_id": int(listing.character_id),
        "seller": listing.seller,
        "price": int(listing.price),
        "listing_date": int(listing.listing_date),
        "status": listing.status.value,
    }


def listing_from_dict(payload: Mapping[str, Any]) -> MarketListing:
    return MarketListing(
        id=int(payload["id"]),
        character_id=int(payload["character_id"]),
        seller=str(payload["seller"]),
        price=int(payload["price"]),
        listing_date=int(payload["listing_date"]),
        status=ListingStatus(str(payload["status"])),
    )
