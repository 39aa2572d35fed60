"""
Business services for Trip Diary.

- invite_token.py: collision-checked invite token issuance
- membership.py: invite redemption, acceptance and member removal
- media.py: short-lived signed URLs for travel and profile images
- cascade.py: deletion of a drained travel and its media
- travel.py: the operations exposed by the travel handlers
"""

__all__: list[str] = []
