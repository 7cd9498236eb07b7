"""User-facing notice texts."""

from enum import StrEnum


class Notice(StrEnum):
    """Localized notices returned alongside API responses."""

    LOAD_FAILED = "Nem sikerült betölteni az étkezési adatokat"
    STATS_FAILED = "Nem sikerült betölteni a statisztikákat"
    SAVE_FAILED = "Nem sikerült menteni az adatokat"
    DELETE_FAILED = "Nem sikerült törölni a rekordot"
    HOLIDAY_LOCKED = "Szünnapon nem lehet kaját rögzíteni"
    FUTURE_LOCKED = "Jövőbeli dátumokat nem lehet módosítani"
    BEFORE_START_LOCKED = "A kezdő dátum előtti napokat nem lehet módosítani"
    OUT_OF_RANGE = "A kért időszak nem érhető el"
    HOLIDAY_MISSING_FIELDS = "Kérlek add meg a dátumot és a nevet"
    HOLIDAY_ADD_FAILED = "Nem sikerült hozzáadni a szünnapot"
    HOLIDAY_DELETE_FAILED = "Nem sikerült törölni a szünnapot"
    HOLIDAYS_LOAD_FAILED = "Nem sikerült betölteni a szünnapokat"
    USERS_LOAD_FAILED = "Nem sikerült betölteni a felhasználókat"
    APPROVAL_FAILED = "Nem sikerült módosítani a jóváhagyást"
    PENDING_APPROVAL = "Egy adminnak jóvá kell hagynia a hozzáférést."


UNKNOWN_RECORDER = "Ismeretlen"

MONTH_NAMES = (
    "Január",
    "Február",
    "Március",
    "Április",
    "Május",
    "Június",
    "Július",
    "Augusztus",
    "Szeptember",
    "Október",
    "November",
    "December",
)
