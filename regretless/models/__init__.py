from .document import UserDocument, SubcollectionDocument

__all__ = [
    "UserDocument",
    "SubcollectionDocument",
]
