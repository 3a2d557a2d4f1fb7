"""Utilitários geográficos"""

import math

# Raio médio da Terra (metros)
EARTH_RADIUS_M = 6371e3


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Distância entre dois pontos pela fórmula de haversine

    Args:
        lat1: latitude do ponto 1 (graus)
        lon1: longitude do ponto 1 (graus)
        lat2: latitude do ponto 2 (graus)
        lon2: longitude do ponto 2 (graus)

    Returns:
        distância em metros
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def accuracy_quality(accuracy: float) -> str:
    """
    Classifica a precisão (metros) de uma leitura de posição

    Returns:
        "excellent", "good", "medium", "bad" ou "very bad"
    """
    if accuracy <= 10:
        return "excellent"
    if accuracy <= 30:
        return "good"
    if accuracy <= 100:
        return "medium"
    if accuracy <= 200:
        return "bad"
    return "very bad"
