NAME_MAX_LENGTH = 255


class LOG_NAME:
    PERMISSION = "Permission"
    ROLE = "Role"


class MESSAGE:
    VALIDATION_ERROR = "Validation error."
    SERVER_ERROR = "Server error."
