from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Protocol

from board.hexpos import Pos
from board.queries import TerrainQuery, UnitQuery
from board.units import MAX_HP, PlayerID, Unit, UnitID

# See http://forums.civfanatics.com/showthread.php?t=432238
BASE_MIN_DAMAGE = 40.0
BASE_MIN_DAMAGE_RANGED = 20.0
BASE_DAMAGE_SPREAD = 30.0
FLANKING_BONUS_PER_UNIT = 10
HP_PENALTY_BAND = 20
HP_PENALTY_PERCENT_PER_BAND = 10


class RNG(Protocol):
    def randint(self, a: int, b: int) -> int: ...


class ModifierKind(str, Enum):
    TERRAIN = "terrain"
    FLANKING = "flanking"


@dataclass(frozen=True, slots=True)
class CombatModifier:
    """Signed percentage applied to a combatant's base strength."""

    kind: ModifierKind
    amount: int

    def __str__(self) -> str:
        return f"{self.kind.value} {self.amount:+d}%"


def combine_modifiers(mods: Iterable[CombatModifier]) -> int:
    return sum(m.amount for m in mods)


@dataclass(frozen=True, slots=True)
class Combatant:
    """One side of an engagement, frozen at the moment the preview is built."""

    unit_id: UnitID
    name: str
    base_strength: float
    starting_hp: int
    modifiers: tuple[CombatModifier, ...] = ()

    def __post_init__(self) -> None:
        if self.base_strength <= 0:
            raise ValueError(f"{self.name}: base strength must be > 0, got {self.base_strength}")

    @property
    def effective_strength(self) -> float:
        return self.base_strength * (1 + combine_modifiers(self.modifiers) / 100)

    def modifier(self, kind: ModifierKind) -> Optional[CombatModifier]:
        for m in self.modifiers:
            if m.kind == kind:
                return m
        return None


# -------------------------------------------------------------------------
# Modifiers
# -------------------------------------------------------------------------

def terrain_modifier(pos: Pos, terrain: TerrainQuery, *, defends: bool) -> Optional[CombatModifier]:
    """Terrain defense bonus under `pos`. Only ever granted to the defender."""
    if not defends:
        return None
    amount = int(terrain.defense_modifier(pos))
    if amount == 0:
        return None
    return CombatModifier(ModifierKind.TERRAIN, amount)


def flank_count(
    opponent_pos: Pos,
    opponent_owner: PlayerID,
    units: UnitQuery,
    *,
    mover: Optional[tuple[UnitID, Pos]] = None,
) -> int:
    """Units next to the opponent that don't belong to the opponent's owner.

    `mover` = (unit_id, pos) counts that unit as standing at `pos` instead
    of where the registry has it.
    """
    count = 0
    for n in opponent_pos.around():
        uid = units.unit_at(n)
        if uid is None or (mover is not None and uid == mover[0]):
            continue
        if units.owner_of(uid) != opponent_owner:
            count += 1
    if mover is not None:
        mover_id, mover_pos = mover
        if mover_pos.is_adjacent(opponent_pos) and units.owner_of(mover_id) != opponent_owner:
            count += 1
    return count


def flanking_modifier(count: int) -> Optional[CombatModifier]:
    """The first adjacent unit is the combatant itself; every other one adds 10%."""
    if count <= 1:
        return None
    return CombatModifier(ModifierKind.FLANKING, (count - 1) * FLANKING_BONUS_PER_UNIT)


# -------------------------------------------------------------------------
# Damage math
# -------------------------------------------------------------------------

def damage_multiplier(source_strength: float, target_strength: float) -> float:
    """Scale applied to damage dealt by `source` to `target`.

    1.0 for equal strengths, above 1 when the source is stronger, the
    reciprocal of that when the target is.
    """
    if source_strength <= 0 or target_strength <= 0:
        raise ValueError("strengths must be > 0")
    strong = max(source_strength, target_strength)
    weak = min(source_strength, target_strength)
    r = strong / weak
    m = 0.5 + (r + 3) ** 4 / 512
    if target_strength > source_strength:
        m = 1 / m
    return m


def hp_penalty(hp: int) -> float:
    """Fraction of damage lost by a wounded source, in 20 HP bands."""
    missing = max(0, MAX_HP - hp)
    # whole percents, so 30 HP gives exactly 0.3
    return (missing // HP_PENALTY_BAND) * HP_PENALTY_PERCENT_PER_BAND / 100


def damage_range(source: Combatant, target: Combatant, *, ranged: bool = False) -> tuple[int, int]:
    """Inclusive (min, max) damage `source` inflicts on `target`."""
    m = damage_multiplier(source.effective_strength, target.effective_strength)
    base_min = BASE_MIN_DAMAGE_RANGED if ranged else BASE_MIN_DAMAGE
    dmg_min = base_min * m
    spread = BASE_DAMAGE_SPREAD * m

    penalty = hp_penalty(source.starting_hp)
    dmg_min -= dmg_min * penalty
    spread -= spread * penalty

    low = max(math.floor(dmg_min), 1)
    high = max(math.floor(dmg_min + spread), low)
    return (low, high)


# -------------------------------------------------------------------------
# Snapshot
# -------------------------------------------------------------------------

@dataclass
class CombatStats:
    """Preview of an engagement, then (after roll()) its outcome.

    Built fresh for each engagement and rolled at most once. The snapshot
    never touches units: applying the result is the caller's job.
    """

    attacker: Combatant
    defender: Combatant
    ranged: bool
    attacker_pos: Pos
    defender_pos: Pos
    dmgrange_to_attacker: tuple[int, int] = field(init=False)
    dmgrange_to_defender: tuple[int, int] = field(init=False)
    dmg_to_attacker: Optional[int] = field(default=None, init=False)
    dmg_to_defender: Optional[int] = field(default=None, init=False)
    _attacker_hp: Optional[int] = field(default=None, init=False, repr=False)
    _defender_hp: Optional[int] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.dmgrange_to_defender = damage_range(self.attacker, self.defender, ranged=self.ranged)
        if self.ranged:
            self.dmgrange_to_attacker = (0, 0)
        else:
            self.dmgrange_to_attacker = damage_range(self.defender, self.attacker)

    @property
    def is_rolled(self) -> bool:
        return self._attacker_hp is not None

    def roll(self, rng: RNG | None = None) -> CombatStats:
        if self.is_rolled:
            raise RuntimeError("Combat already rolled")
        r = rng or random.Random()

        dmg_to_defender = int(r.randint(*self.dmgrange_to_defender))
        dmg_to_attacker = 0 if self.ranged else int(r.randint(*self.dmgrange_to_attacker))

        attacker_hp = self.attacker.starting_hp - dmg_to_attacker
        defender_hp = self.defender.starting_hp - dmg_to_defender

        # Only one unit can die. Revive the "less dead" one.
        if attacker_hp <= 0 and defender_hp <= 0:
            if self._attacker_survives(attacker_hp, defender_hp):
                attacker_hp = 1
            else:
                defender_hp = 1

        attacker_hp = min(max(attacker_hp, 0), self.attacker.starting_hp)
        defender_hp = min(max(defender_hp, 0), self.defender.starting_hp)

        self._attacker_hp = attacker_hp
        self._defender_hp = defender_hp
        self.dmg_to_attacker = self.attacker.starting_hp - attacker_hp
        self.dmg_to_defender = self.defender.starting_hp - defender_hp
        return self

    def _attacker_survives(self, attacker_hp: int, defender_hp: int) -> bool:
        if attacker_hp != defender_hp:
            return attacker_hp > defender_hp
        # Tie: the stronger side holds, the defender when even.
        return self.attacker.effective_strength > self.defender.effective_strength

    def _require_rolled(self) -> None:
        if not self.is_rolled:
            raise RuntimeError("Combat not rolled yet")

    def attacker_remaining_hp(self) -> int:
        self._require_rolled()
        assert self._attacker_hp is not None
        return self._attacker_hp

    def defender_remaining_hp(self) -> int:
        self._require_rolled()
        assert self._defender_hp is not None
        return self._defender_hp

    def defender_captured(self) -> bool:
        """The defender died and the attacker takes its position."""
        return self.defender_remaining_hp() == 0

    def verdict(self) -> str:
        if self.attacker_remaining_hp() == 0:
            return "Crushing Defeat"
        if self.defender_remaining_hp() == 0:
            return "Decisive Victory"
        if (self.dmg_to_defender or 0) > (self.dmg_to_attacker or 0):
            return "Victory"
        return "Defeat"

    def summary_lines(self) -> list[str]:
        amin, amax = self.dmgrange_to_attacker
        dmin, dmax = self.dmgrange_to_defender
        lines = [
            f"Attacker: {self.attacker.name}",
            f"HP: {self.attacker.starting_hp}",
            f"Dmg incoming (min/max): {amin}/{amax}",
            f"Defender: {self.defender.name}",
            f"HP: {self.defender.starting_hp}",
            f"Dmg incoming (min/max): {dmin}/{dmax}",
        ]
        if self.is_rolled:
            lines += [
                self.verdict(),
                f"Attacker dmg received: {self.dmg_to_attacker}, remaining HP: {self.attacker_remaining_hp()}",
                f"Defender dmg received: {self.dmg_to_defender}, remaining HP: {self.defender_remaining_hp()}",
            ]
        return lines


def build_combat(
    attacker: Unit,
    defender: Unit,
    *,
    terrain: TerrainQuery,
    units: UnitQuery,
    attacker_pos: Optional[Pos] = None,
) -> CombatStats:
    """Snapshot an engagement of `attacker` against `defender`.

    `attacker_pos` is where the attacker strikes from (defaults to where it
    stands). Ranged engagements pit the attacker's ranged strength against
    the defender's better strength, and the defender does not strike back.
    Zero strength on either side raises ValueError.
    """
    if attacker.owner == defender.owner:
        raise ValueError("Cannot attack a unit of the same owner")

    from_pos = attacker.pos if attacker_pos is None else attacker_pos
    ranged = attacker.ranged_strength > 0

    if ranged:
        attacker_base = attacker.ranged_strength
        defender_base = max(defender.ranged_strength, defender.strength)
    else:
        attacker_base = attacker.strength
        defender_base = defender.strength

    # Each side is judged by how surrounded its opponent is, with the
    # attacker counted at the cell it strikes from.
    mover = (attacker.unit_id, from_pos)
    attacker_mods = [
        flanking_modifier(flank_count(defender.pos, defender.owner, units, mover=mover)),
    ]
    defender_mods = [
        terrain_modifier(defender.pos, terrain, defends=True),
        flanking_modifier(flank_count(from_pos, attacker.owner, units, mover=mover)),
    ]

    return CombatStats(
        attacker=Combatant(
            unit_id=attacker.unit_id,
            name=attacker.name,
            base_strength=attacker_base,
            starting_hp=attacker.hp,
            modifiers=tuple(m for m in attacker_mods if m is not None),
        ),
        defender=Combatant(
            unit_id=defender.unit_id,
            name=defender.name,
            base_strength=defender_base,
            starting_hp=defender.hp,
            modifiers=tuple(m for m in defender_mods if m is not None),
        ),
        ranged=ranged,
        attacker_pos=from_pos,
        defender_pos=defender.pos,
    )
