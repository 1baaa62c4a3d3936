# skirmish/battlefield.py

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from board.hexpos import Direction, Pos
from board.terrain import TerrainMap
from board.units import PlayerID, Unit, UnitID, UnitRegistry
from skirmish.combat import RNG, CombatStats, build_combat
from skirmish.reachability import PathAssessment, ReachabilityResolver


class Battlefield:
    """Terrain plus units: the one place where resolver results get applied.

    The reachability and combat resolvers only read this state; moves,
    HP changes, deaths and captures are written here, and every change is
    recorded on `log`.
    """

    def __init__(self, terrain: TerrainMap, units: Optional[UnitRegistry] = None,
                 *, max_depth: Optional[int] = None):
        self.terrain = terrain
        self.units = units if units is not None else UnitRegistry()
        self.turn: int = 0
        self.log: List[str] = []
        self.resolver = ReachabilityResolver(self.terrain, self.units, max_depth=max_depth)

    # -----------------------------
    # Basic state helpers
    # -----------------------------
    def add_unit(self, name: str, owner: PlayerID, unit_type, pos: Pos, **kwargs) -> Unit:
        if not self.terrain.is_passable(pos):
            raise ValueError(f"Cannot place {name} on impassable {pos}")
        return self.units.add(name, owner, unit_type, pos, **kwargs)

    def get_unit(self, unit_id: UnitID) -> Unit:
        return self.units.get(unit_id)

    def new_turn(self) -> None:
        self.turn += 1
        self.units.refresh()
        self.log.append(f"Turn {self.turn} begins.")

    def details(self, pos: Pos) -> List[str]:
        """Lines describing a selected position: unit, stats, terrain, turn."""
        uid = self.units.unit_at(pos)
        if uid is not None:
            unit = self.units.get(uid)
            unit_name, unit_stats = unit.name, f"MV {unit.movements} / HP {unit.hp}"
        else:
            unit_name, unit_stats = "", ""
        return [unit_name, unit_stats, self.terrain.get_terrain(pos).label, f"Turn {self.turn}"]

    # -----------------------------
    # Movement
    # -----------------------------
    def reachable_positions(self, unit_id: UnitID) -> Dict[Pos, PathAssessment]:
        return self.resolver.reachable_positions(unit_id)

    def move_unit_to(self, unit_id: UnitID, dest: Pos) -> Tuple[bool, str]:
        """Move along the cheapest reachable path. Attacks go through prepare_attack()."""
        unit = self.units.get(unit_id)
        if unit.is_exhausted():
            return False, f"{unit.name} has no movement left."

        assessment = self.reachable_positions(unit_id).get(dest)
        if assessment is None:
            return False, f"{dest} is not reachable by {unit.name}."
        if assessment.is_attack:
            return False, f"{dest} is held by an enemy: attack it instead."

        start = unit.pos
        spent = assessment.move_cost(unit.movements)
        self.units.move(unit_id, dest)
        unit.spend_movements(spent)
        note = " (zone of control)" if assessment.is_exhausting else ""
        self.log.append(f"{unit.name} moved from {start} to {dest}, spending {spent} MV{note}.")
        return True, f"Moved {unit.name} to {dest}."

    def move_unit(self, unit_id: UnitID, direction: Direction) -> Tuple[bool, str]:
        """Single step in `direction`. Stepping onto an enemy is refused: attack instead."""
        unit = self.units.get(unit_id)
        return self.move_unit_to(unit_id, unit.pos.neighbor(direction))

    # -----------------------------
    # Combat
    # -----------------------------
    def attack_path(self, unit_id: UnitID, target: Pos) -> Optional[PathAssessment]:
        assessment = self.reachable_positions(unit_id).get(target)
        if assessment is None or not assessment.is_attack:
            return None
        return assessment

    def prepare_attack(self, unit_id: UnitID, target: Pos) -> Optional[CombatStats]:
        """Combat preview against the enemy at `target`, None if it can't be attacked."""
        assessment = self.attack_path(unit_id, target)
        if assessment is None:
            return None
        defender_id = self.units.unit_at(target)
        assert defender_id is not None
        return build_combat(
            self.units.get(unit_id),
            self.units.get(defender_id),
            terrain=self.terrain,
            units=self.units,
            attacker_pos=assessment.staging,
        )

    def confirm_attack(self, stats: CombatStats, rng: RNG | None = None) -> CombatStats:
        """Roll `stats` and write the outcome back onto the units.

        The preview must still hold: same positions and HP for the defender,
        same HP for the attacker, and the attacker must still be able to
        reach the defender through the same staging cell this turn.
        Otherwise ValueError. Units that died since raise KeyError.
        """
        attacker = self.units.get(stats.attacker.unit_id)
        defender = self.units.get(stats.defender.unit_id)
        if defender.pos != stats.defender_pos:
            raise ValueError(f"{defender.name} moved since the preview was built")
        if attacker.hp != stats.attacker.starting_hp or defender.hp != stats.defender.starting_hp:
            raise ValueError("HP changed since the preview was built")

        assessment = self.attack_path(attacker.unit_id, stats.defender_pos)
        if assessment is None or assessment.staging != stats.attacker_pos:
            raise ValueError(f"{attacker.name} can no longer attack {defender.name} from {stats.attacker_pos}")

        if attacker.pos != stats.attacker_pos:
            self.units.move(attacker.unit_id, stats.attacker_pos)

        stats.roll(rng)
        self.log.append(
            f"{attacker.name} attacks {defender.name} at {defender.pos}: "
            f"deals {stats.dmg_to_defender} (range {stats.dmgrange_to_defender}), "
            f"takes {stats.dmg_to_attacker} (range {stats.dmgrange_to_attacker})."
        )

        attacker.hp = stats.attacker_remaining_hp()
        defender.hp = stats.defender_remaining_hp()
        attacker.movements = 0

        if defender.is_dead():
            captured = defender.pos
            self.units.remove(defender.unit_id)
            self.log.append(f"{defender.name} is destroyed.")
            self.units.move(attacker.unit_id, captured)
            self.log.append(f"{attacker.name} captures {captured}.")
        if attacker.is_dead():
            self.units.remove(attacker.unit_id)
            self.log.append(f"{attacker.name} is destroyed.")

        self.log.append(stats.verdict())
        return stats

    def attack(self, unit_id: UnitID, target: Pos, rng: RNG | None = None) -> Optional[CombatStats]:
        """Preview and confirm in one go."""
        stats = self.prepare_attack(unit_id, target)
        if stats is None:
            return None
        return self.confirm_attack(stats, rng)
