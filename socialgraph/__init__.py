"""
Socialgraph - Core logic for friendships, recommendations and notifications.

This package contains:
- models: Domain models (Account, PendingRequest, Notification, etc.)
- state: Relationship state resolution
- workflow: Friend request workflow
- recommendation: Friend-of-friend recommendations
- notifications: Notification fan-out
- cascade: Account deletion cascade
- data: Storage protocols and PocketBase repositories
"""
