from verses.db.models.like import Like
from verses.db.models.poem import Poem
from verses.db.models.user import User

__all__ = ["Like", "Poem", "User"]
