from enum import Enum


class FuelType(str, Enum):
    GASOLINE = "GASOLINE"
    DIESEL = "DIESEL"
    ETHANOL = "ETHANOL"
    CNG = "CNG"
