"""
API Routers - Organized endpoint handlers for the social graph API.

Each router handles a specific domain:
- friends: friend request workflow, friend lists, state and recommendations
- users: account summaries and account deletion
- notifications: the caller's notifications
- content: likes and comments that feed notifications
"""
