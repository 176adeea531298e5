class BlogServiceError(Exception):
    """Base class for errors raised by the content services."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BlogServiceError):
    status_code = 404


class DuplicateError(BlogServiceError):
    status_code = 409


class ValidationError(BlogServiceError):
    status_code = 400
