"""Stock venue layouts organizers can start a seating plan from."""

from decimal import Decimal

from reservations.domain.models import Section
from reservations.domain.value_objects import Money


def _labels(count: int) -> tuple[str, ...]:
    return tuple(str(n) for n in range(1, count + 1))


def _section(section_id: str, name: str, rows: str, seats: int, price: int) -> Section:
    return Section(
        id=section_id,
        name=name,
        rows=tuple(rows),
        seat_labels=_labels(seats),
        price=Money(Decimal(price)),
    )


PLAN_TEMPLATES: dict[str, tuple[Section, ...]] = {
    "theater": (
        _section("orchestra", "Orchestra", "ABCDEF", 20, 2500),
        _section("mezzanine", "Mezzanine", "GHIJ", 20, 1800),
        _section("balcony", "Balcony", "KLM", 20, 1200),
    ),
    "arena": (
        _section("vip", "VIP Floor", "AB", 30, 5000),
        _section("floor", "Floor Standing", "CDEF", 30, 3000),
        _section("tier1", "Tier 1", "GHIJ", 30, 2000),
        _section("tier2", "Tier 2", "KLMN", 30, 1500),
    ),
    "conference": (
        _section("front", "Front Section", "ABC", 40, 1500),
        _section("middle", "Middle Section", "DEFG", 40, 1200),
        _section("back", "Back Section", "HIJK", 40, 800),
    ),
    "stadium": (
        _section("premium", "Premium Box", "AB", 20, 8000),
        _section("vip", "VIP Stands", "CDE", 30, 5000),
        _section("general", "General Stands", "FGHIJKLMNO", 30, 2000),
    ),
    "cabaret": (
        _section("stage", "Stage Tables", "AB", 8, 4000),
        _section("front", "Front Tables", "CDE", 10, 3000),
        _section("back", "Back Tables", "FGH", 10, 2000),
    ),
}
