from typing import Dict, List, Optional, Union

from rbac_admin.constants import MESSAGE


class RbacError(Exception):
    """Base class for errors the API reports with a dedicated envelope."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[Union[Dict, List]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors if errors is not None else []


class ValidationFailed(RbacError):
    """Input was malformed or violated a field constraint."""

    status_code = 422

    def __init__(
        self,
        errors: Dict[str, List[str]],
        message: str = MESSAGE.VALIDATION_ERROR,
    ):
        super().__init__(message, errors)


class NotFound(RbacError):
    """A referenced permission or role does not exist."""

    status_code = 404
