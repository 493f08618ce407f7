"""
User profile source.

Responsibilities:
- Fetch a user's bar from the BAXUS profile API.
- Validate the payload into typed bar items and owned whisky ids.
- Cache responses briefly so repeat requests do not hit the API.
"""
