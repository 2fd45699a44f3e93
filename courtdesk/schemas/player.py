"""Pydantic Schemas für Spieler einer Reservierung

Spielerlisten existieren in zwei Formaten:

- Version 1 (Altbestand): reine Namensliste ``["Anna", "Ben"]``
- Version 2: Objekte mit Mitglieds-/Gast-Kennzeichen
  ``{"version": 2, "players": [{"name": ..., "user_id": ..., "is_member": ..., "is_guest": ...}]}``

Beim Lesen wird immer sofort auf Version 2 migriert.
"""
from typing import Annotated, Any, List, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator


class Player(BaseModel):
    """Ein Spieler (Mitglied oder Gast)"""
    name: str = Field(..., min_length=1, max_length=200)
    user_id: Optional[str] = Field(None, max_length=100)
    is_member: bool = True
    is_guest: bool = False

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Spielername darf nicht leer sein")
        return v.strip()

    @field_validator('user_id', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        """Konvertiert leere Strings zu None"""
        if isinstance(v, str) and v.strip() == '':
            return None
        return v

    @model_validator(mode='after')
    def check_member_or_guest(self):
        if self.is_member == self.is_guest:
            raise ValueError(f"Spieler '{self.name}' muss entweder Mitglied oder Gast sein")
        return self


class LegacyRoster(BaseModel):
    """Version 1: nur Namen, alle Spieler gelten als Mitglieder"""
    version: Literal[1] = 1
    names: List[str]


class PlayerRoster(BaseModel):
    """Version 2: Spielerobjekte"""
    version: Literal[2] = 2
    players: List[Player]


Roster = Annotated[Union[LegacyRoster, PlayerRoster], Field(discriminator="version")]

_roster_adapter = TypeAdapter(Roster)


def parse_roster(raw: Any) -> Union[LegacyRoster, PlayerRoster]:
    """
    Liest eine gespeicherte Spielerliste in eine der beiden Versionen ein.

    Ungetaggte Listen stammen aus der Zeit vor der Versionierung: reine
    String-Listen sind Version 1, Objekt-Listen Version 2.

    Raises:
        ValueError: Bei unbekanntem oder gemischtem Format
    """
    if isinstance(raw, dict):
        return _roster_adapter.validate_python(raw)

    if isinstance(raw, list):
        if all(isinstance(p, str) for p in raw):
            return LegacyRoster(names=raw)
        if all(isinstance(p, (dict, Player)) for p in raw):
            return PlayerRoster(players=raw)
        raise ValueError("Spielerliste mischt Alt- und Neuformat")

    raise ValueError(f"Unbekanntes Spielerformat: {type(raw).__name__}")


def migrate_roster(roster: Union[LegacyRoster, PlayerRoster], reserver_user_id: Optional[str]) -> PlayerRoster:
    """
    Migriert eine Spielerliste auf Version 2.

    Im Altformat ist der erste Name immer der Reservierer.
    """
    if isinstance(roster, PlayerRoster):
        return roster

    players = [
        Player(
            name=name,
            user_id=reserver_user_id if index == 0 else None,
            is_member=True,
            is_guest=False,
        )
        for index, name in enumerate(roster.names)
    ]
    return PlayerRoster(players=players)


def normalize_players(raw: Any, reserver_user_id: Optional[str] = None) -> List[Player]:
    """Spielerliste in beliebigem gespeicherten Format -> Liste von Player"""
    return migrate_roster(parse_roster(raw), reserver_user_id).players


def dump_roster(players: List[Player]) -> dict:
    """Serialisiert Spieler im aktuellen, getaggten Format für die JSON-Spalte"""
    return PlayerRoster(players=players).model_dump()
