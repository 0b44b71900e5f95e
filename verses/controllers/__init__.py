from verses.controllers.auth import AuthController
from verses.controllers.health import health
from verses.controllers.poems import PoemsController
from verses.controllers.users import UsersController

__all__ = ["AuthController", "PoemsController", "UsersController", "health"]
