from eventreg.handlers.views import EventDetailView, EventListView, EventRegistrationView

__all__ = ["EventListView", "EventDetailView", "EventRegistrationView"]
