"""
Composition des filtres de requête
Chaque critère présent ajoute un prédicat paramétré; un critère absent n'ajoute rien.
"""
from typing import Any, Callable, Iterable, Tuple

Criterion = Tuple[Any, Callable[[Any], Any]]


def compose_filters(query, criteria: Iterable[Criterion]):
    """Applique dans l'ordre les critères (valeur, fabrique de prédicat) non nuls"""
    for value, build in criteria:
        if value is not None:
            query = query.filter(build(value))
    return query
