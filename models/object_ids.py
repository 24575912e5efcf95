from bson import ObjectId
from bson.errors import InvalidId


def parse_object_id(value):
    """Return an ObjectId for value, or None when it is not a valid id"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None
