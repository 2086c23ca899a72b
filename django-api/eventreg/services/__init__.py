from django.conf import settings

from eventreg.services.catalog_service import EventCatalog
from eventreg.services.registration_service import RegistrationService
from eventreg.stores import get_item_store

__all__ = ["EventCatalog", "RegistrationService", "get_catalog", "get_registration_service"]


def get_catalog() -> EventCatalog:
    return EventCatalog(
        get_item_store(),
        overfetch_factor=settings.EVENTREG_LIST_OVERFETCH_FACTOR,
    )


def get_registration_service() -> RegistrationService:
    return RegistrationService(
        get_item_store(),
        get_catalog(),
        case_sensitive_emails=settings.EVENTREG_CASE_SENSITIVE_EMAILS,
        cas_attempts=settings.EVENTREG_CAPACITY_CAS_ATTEMPTS,
    )
