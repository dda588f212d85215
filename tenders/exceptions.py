"""Erreurs du moteur de rotation du coffre.

Toutes dérivent de `VaultError` : les jobs planifiés les interceptent tender
par tender, les journalisent et poursuivent le lot.
"""


class VaultError(Exception):
    """Base des erreurs de rotation."""


class EligibilityMismatch(VaultError):
    """Le tender ne remplit plus les conditions au moment de l'activation."""


class IdCollision(VaultError):
    """Aucun identifiant public unique trouvé après le nombre d'essais autorisé."""


class ConversionConflict(VaultError):
    """Le cycle est déjà attribué ou expiré (course bénigne avec un autre acteur)."""


class StoreFailure(VaultError):
    """Erreur de transaction : l'unité de travail a été annulée."""


class JobAlreadyRunning(VaultError):
    """Une autre exécution du même job planifié détient le verrou."""
