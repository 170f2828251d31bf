from __future__ import annotations

LB_PER_KG = 2.20462
GAL_PER_L = 0.264172
G_PER_OZ = 28.3495


def kg_to_lb(kg: float) -> float:
    return kg * LB_PER_KG


def lb_to_kg(lb: float) -> float:
    return lb / LB_PER_KG


def l_to_gal(liters: float) -> float:
    return liters * GAL_PER_L


def gal_to_l(gallons: float) -> float:
    return gallons / GAL_PER_L


def g_to_oz(grams: float) -> float:
    return grams / G_PER_OZ


def c_to_f(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0


def f_to_c(fahrenheit: float) -> float:
    return (fahrenheit - 32.0) * 5.0 / 9.0
