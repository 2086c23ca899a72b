from django.apps import AppConfig


class EventRegConfig(AppConfig):
    """Configuration for the event registration app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "eventreg"

    def ready(self) -> None:
        """Connect signal receivers once Django is fully loaded."""
        from eventreg import signals  # noqa: F401
