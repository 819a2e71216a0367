from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_PLAYERS = 3
CUSTOM_OPTION = "custom"

SPECIES_OPTIONS = [
    "Human", "Elf", "Dwarf", "Halfling", "Dragonborn", "Gnome",
    "Half-Elf", "Half-Orc", "Tiefling", "Aasimar", "Firbolg",
    "Goliath", "Kenku", "Lizardfolk", "Tabaxi", "Triton", "Warforged",
]

CLASS_OPTIONS = [
    "Barbarian", "Bard", "Cleric", "Druid", "Fighter", "Monk",
    "Paladin", "Ranger", "Rogue", "Sorcerer", "Warlock", "Wizard",
    "Artificer", "Blood Hunter",
]

CAMPAIGN_LENGTHS = ["quickie-quickie", "quickie", "short", "normal", "long", "epic"]

MUSIC_THEMES = ["spunky", "funky", "adventurous", "thrilling", "eerie", "spicy", "classic"]


class PlayerConfig(BaseModel):
    """A party member as stored by the configure screen.

    `species` and `class` may be the literal "custom", in which case the
    matching `customSpecies` / `customClass` value is used instead.
    """

    model_config = ConfigDict(populate_by_name=True)

    player_number: Optional[int] = Field(default=None, alias="playerNumber")
    name: str = ""
    species: str = ""
    class_: str = Field(default="", alias="class")
    custom_species: Optional[str] = Field(default=None, alias="customSpecies", exclude=True)
    custom_class: Optional[str] = Field(default=None, alias="customClass", exclude=True)

    @model_validator(mode="after")
    def _resolve_custom_choices(self) -> "PlayerConfig":
        if self.species.strip().lower() == CUSTOM_OPTION:
            self.species = (self.custom_species or "").strip()
        if self.class_.strip().lower() == CUSTOM_OPTION:
            self.class_ = (self.custom_class or "").strip()
        return self

    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.species.strip() and self.class_.strip())


class GameConfiguration(BaseModel):
    """Serialized game configuration written at configure time."""

    model_config = ConfigDict(populate_by_name=True)

    music_theme: str = Field(default="", alias="musicTheme")
    players: List[PlayerConfig] = Field(default_factory=list)
    campaign_length: str = Field(default="", alias="campaignLength")
    genre: str = ""

    def validation_errors(self) -> List[str]:
        """Return the reasons this configuration cannot start a game."""
        errors: List[str] = []
        if not self.campaign_length.strip():
            errors.append("campaignLength is required")
        if not self.genre.strip():
            errors.append("genre is required")
        if not 1 <= len(self.players) <= MAX_PLAYERS:
            errors.append(f"between 1 and {MAX_PLAYERS} players are required")
        for index, player in enumerate(self.players, start=1):
            if not player.is_complete():
                errors.append(f"player {index} needs a name, species and class")
        return errors

    def to_storage(self) -> dict:
        """Return the camelCase document stored in the configuration slot."""
        players = []
        for index, player in enumerate(self.players, start=1):
            players.append(
                {
                    "playerNumber": player.player_number or index,
                    "name": player.name,
                    "species": player.species,
                    "class": player.class_,
                }
            )
        return {
            "musicTheme": self.music_theme,
            "players": players,
            "campaignLength": self.campaign_length,
            "genre": self.genre,
        }
