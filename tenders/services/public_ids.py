"""Émission des identifiants clients publics (format `CL-XXXXXXXXX`).

L'unicité est vérifiée contre l'ensemble canonique des identifiants émis
(`TenderCycle.public_id`). La contrainte d'unicité de la base ferme la fenêtre
entre la vérification et l'insertion (voir `services.activation`).
"""
import secrets

from tenders.conf import vault_setting
from tenders.exceptions import IdCollision
from tenders.models import TenderCycle

PUBLIC_ID_PREFIX = "CL-"


def generate_public_id() -> str:
    digits = 100_000_000 + secrets.randbelow(900_000_000)
    return f"{PUBLIC_ID_PREFIX}{digits}"


def public_id_taken(public_id: str) -> bool:
    return TenderCycle.objects.filter(public_id=public_id).exists()


def issue_public_id(generate=generate_public_id, max_attempts=None) -> str:
    """Retourne un identifiant absent de la base au moment de la vérification.

    Raises:
        IdCollision: si `max_attempts` candidats consécutifs sont déjà pris.
    """
    attempts = max_attempts or vault_setting("PUBLIC_ID_ATTEMPTS")
    for _ in range(attempts):
        candidate = generate()
        if not public_id_taken(candidate):
            return candidate
    raise IdCollision(f"Impossible de générer un identifiant client unique après {attempts} essais")
