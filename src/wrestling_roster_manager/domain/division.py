from enum import StrEnum


class Division(StrEnum):
    ONE = "I"
    TWO = "II"
