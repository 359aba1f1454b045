"""Hunter registration."""

from hunter.modules.hunter.registration_service import HunterRegistrationService

__all__ = ["HunterRegistrationService"]
