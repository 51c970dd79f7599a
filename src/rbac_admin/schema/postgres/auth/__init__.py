from ._permission import permission
from ._role import role
from ._role_permission import role_permission


__all__ = [
    "permission",
    "role",
    "role_permission",
]
