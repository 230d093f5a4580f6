"""
Primary key helpers shared by the models
"""

import uuid


def new_uuid() -> str:
    return str(uuid.uuid4())
