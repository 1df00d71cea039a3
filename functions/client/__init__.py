"""
Client-side state for the portfolio site.

Theme selection, the notification slot and the contact intake client are
explicit state objects; timers, persisted storage and the backend API are
injected so they can be swapped for in-memory versions in tests.
"""
