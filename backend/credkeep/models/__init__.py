from credkeep.models.principal import PrincipalRow

__all__ = [
    "PrincipalRow",
]
